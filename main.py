import pathlib
import sys

from rich.pretty import pprint

from flagstone import *


def config_convertor(value):
    if not isinstance(value, str):
        raise ExpectedException('path to the configuration file is not set, use "--config=<path>"')
    return pathlib.Path.cwd() / value


def sleep_convertor(value):
    value = integer_convertor(value)
    if value is None:
        return None
    if value < 200:
        raise ExpectedException('the sleep time must not be less than 200 ms. "--sleep=<number>"')
    return value


def main(argv):
    args = Arguments(argv, {
        **Arguments.create_help_options(),
        "config": {
            "short": "c",
            "description": "Path to the configuration file in JSON format.",
            "convertor": config_convertor,
            "default": lambda: "config.json",
        },
        "delete": {
            "description": "Deletes all folders according to the configuration file.",
            "convertor": Arguments.strict_boolean_convertor,
        },
        "sleep": {
            "short": "s",
            "description": "Sleep duration between processes in milliseconds.",
            "convertor": sleep_convertor,
            "default": lambda: 5000,
        },
    }).set_description("My beautiful program.")

    if args.is_help_requested():
        args.trigger_help()

    return args.get_flags()


if __name__ == '__main__':
    pprint(invoke(main, sys.argv[1:]))
