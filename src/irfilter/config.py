import argparse

from . import __version__
from .constants import PROGNAME
from .source import INPUT_FORMAT
from .util import cast_boolean, filepath, get_env_variable

LOG_LEVELS = ['INFO', 'DEBUG']


class CustomHelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    """
    subclass the default help formatter to stop default printing for required arguments
    """

    def _format_args(self, action, default_metavar):
        if action.metavar is None:
            action.metavar = get_metavar(action.type)
        return super(CustomHelpFormatter, self)._format_args(action, default_metavar)

    def _get_help_string(self, action):
        if action.required or not action.option_strings:
            return action.help
        return super(CustomHelpFormatter, self)._get_help_string(action)

    def add_arguments(self, actions):
        # sort the arguments alphanumerically so they print in the help that way
        actions = sorted(actions, key=lambda x: getattr(x, 'option_strings'))
        super(CustomHelpFormatter, self).add_arguments(actions)


def get_metavar(arg_type):
    """
    For a given argument type, returns the string to be used for the metavar argument in add_argument

    Example:
        >>> get_metavar(bool)
        '{True,False}'
    """
    if arg_type in [bool, cast_boolean]:
        return '{True,False}'
    elif arg_type == float:
        return 'FLOAT'
    elif arg_type == int:
        return 'INT'
    elif arg_type == filepath:
        return 'FILEPATH'
    return None


def create_parser() -> argparse.ArgumentParser:
    """
    the command line parser. Option defaults may be overridden by the equivalent IRFILTER_ environment variable
    """
    parser = argparse.ArgumentParser(
        prog=PROGNAME,
        formatter_class=CustomHelpFormatter,
        description='filters the fragments of a raw IR table into kept (high-confidence) and discarded '
        '(low-confidence) tables',
    )
    parser.add_argument(
        '-v',
        '--version',
        action='version',
        version='%(prog)s version ' + __version__,
        help='Outputs the version number',
    )
    parser.add_argument(
        'input',
        type=filepath,
        help='path to the raw IR table or the name collated SAM/BAM file',
    )
    parser.add_argument(
        '-o',
        '--output',
        default=get_env_variable('output', '.'),
        help='path to the output directory',
    )
    parser.add_argument(
        '--input_format',
        default=get_env_variable('input_format', INPUT_FORMAT.AUTO),
        choices=INPUT_FORMAT.values(),
        help='format of the input file. auto picks the format from the file extension',
    )
    parser.add_argument('--log', help='redirect stdout to a log file', default=None)
    parser.add_argument(
        '--log_level',
        help='level of logging to output',
        choices=LOG_LEVELS,
        default=get_env_variable('log_level', 'INFO'),
    )
    return parser
