import sys

from rich.pretty import pprint

from argqueue import *


@flag("--verbose", "-v")
def verbose(token):
    pprint({"flag": token})


@action("--name", nargs=1)
def name(value):
    pprint({"name": value})


dispatcher = Dispatcher([verbose, name], shell=True, fancy=True)


if __name__ == '__main__':
    status = invoke(dispatcher)
    pprint(dispatcher.unused)
    sys.exit(status)
