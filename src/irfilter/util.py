import errno
import logging
import os
import time
from glob import glob
from typing import Dict, List, Optional

from braceexpand import braceexpand

from .constants import COMPLETE_STAMP
from .error import UsageError

ENV_VAR_PREFIX = 'IRFILTER_'

logger = logging.getLogger('irfilter')


def bash_expands(*expressions: str) -> List[str]:
    """
    expand a file glob expression, allowing bash-style brackets.

    Returns:
        list: a list of files

    Example:
        >>> bash_expands('./{test,doc}/*py')
        [...]
    """
    result = []
    for expression in expressions:
        eresult = []
        for name in braceexpand(expression):
            for fname in glob(name):
                eresult.append(fname)
        if not eresult:
            raise FileNotFoundError('The expression does not match any files', expression)
        result.extend(eresult)
    return [os.path.abspath(f) for f in result]


def filepath(path: str) -> str:
    try:
        file_list = bash_expands(path)
    except FileNotFoundError:
        raise UsageError('File does not exist', path)
    else:
        if len(file_list) > 1:
            raise UsageError('File pattern match multiple files and expected only one', path)
    return file_list[0]


def cast_boolean(input_value) -> bool:
    value = str(input_value).lower()
    if value in ['t', 'true', '1', 'y', 'yes', '+']:
        return True
    elif value in ['f', 'false', '0', 'n', 'no', '-']:
        return False
    raise TypeError('casting to boolean failed', input_value)


def cast(value, cast_func):
    """
    cast a value to a given type

    Example:
        >>> cast('1', int)
        1
    """
    if cast_func == bool:
        value = cast_boolean(value)
    else:
        value = cast_func(value)
    return value


def get_env_variable(arg: str, default, cast_type=None):
    """
    Args:
        arg: the argument/variable name
    Returns:
        the setting from the environment variable if given, otherwise the default value
    """
    if cast_type is None:
        cast_type = type(default)
    name = ENV_VAR_PREFIX + str(arg).upper()
    result = os.environ.get(name, None)
    if result is not None:
        return cast(result, cast_type)
    return default


def log_arguments(args):
    """
    output the arguments to the console

    Args:
        args (Namespace): the namespace to print arguments for
    """
    logger.info('arguments')
    for arg, val in sorted(vars(args).items()):
        if isinstance(val, (str, int, float, bool, tuple)) or val is None:
            logger.info(f'{arg} = {repr(val)}')
        else:
            logger.info(f'{arg} = {object.__repr__(val)}')


def mkdirp(dirname: str) -> str:
    """
    Make a directory or path of directories. Suppresses the error that is normally raised when the directory already exists
    """
    logger.info(f"creating output directory: '{dirname}'")
    try:
        os.makedirs(dirname)
    except OSError as exc:
        if exc.errno == errno.EEXIST and os.path.isdir(dirname):
            pass
        else:
            raise exc
    return dirname


def format_duration(duration: int) -> str:
    """
    Example:
        >>> format_duration(3725)
        '1:02:05'
    """
    hours = duration - duration % 3600
    minutes = duration - hours - (duration - hours) % 60
    seconds = duration - hours - minutes
    return '{}:{:02d}:{:02d}'.format(hours // 3600, minutes // 60, seconds)


def generate_complete_stamp(
    output_dir: str, counts: Optional[Dict[str, int]] = None, start_time: Optional[int] = None
) -> str:
    """
    writes a complete stamp, optionally including the row counts and the run time if start_time is given

    Args:
        output_dir: path to the output dir the stamp should be written in
        counts: number of rows written per table
        start_time: the start time

    Return:
        path to the complete stamp

    Example:
        >>> generate_complete_stamp('some_output_dir')
        'some_output_dir/IRFILTER.COMPLETE'
    """
    stamp = os.path.join(output_dir, COMPLETE_STAMP)
    logger.info(f'complete: {stamp}')
    with open(stamp, 'w') as fh:
        for table, count in (counts or {}).items():
            fh.write('{} rows: {}\n'.format(table, count))
        if start_time is not None:
            duration = int(time.time()) - start_time
            fh.write('run time (hh/mm/ss): {}\n'.format(format_duration(duration)))
            fh.write('run time (s): {}\n'.format(duration))
    return stamp
