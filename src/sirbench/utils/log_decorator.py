"""A module that defines a decorator for the sirbench logger."""

import logging
import os
from datetime import datetime
from functools import wraps


def _short_repr(value, max_length: int = 80) -> str:
    text = repr(value)
    if len(text) > max_length:
        text = text[: max_length - 3] + "..."
    return text


def log_decorator(_func=None):
    """Log the start, duration and failure of a function call.

    Can be used as `@log_decorator()` or `log_decorator(func)`.

    Parameters
    ----------
    _func : function, optional
        the function to wrap when called directly. Defaults to None.
    """

    def log_decorator_info(func):
        @wraps(func)
        def log_decorator_wrapper(*args, **kwargs):
            logger = logging.getLogger("sirbench")
            formatted_arguments = ", ".join(
                [_short_repr(a) for a in args]
                + [f"{k}={_short_repr(v)}" for k, v in kwargs.items()]
            )
            extra_args = {
                "func_name_override": func.__name__,
                "file_name_override": os.path.basename(
                    func.__code__.co_filename
                ),
            }
            start_time = datetime.now()
            logger.info(
                f"Arguments: {formatted_arguments} - Begin function",
                extra=extra_args,
            )
            try:
                value = func(*args, **kwargs)
            except Exception as ex:
                logger.error(f"Exception: {ex}", extra=extra_args)
                raise
            execution_time = datetime.now() - start_time
            logger.info(
                f"Execution Time: {execution_time} - End function",
                extra=extra_args,
            )
            return value

        return log_decorator_wrapper

    if _func is None:
        return log_decorator_info
    else:
        return log_decorator_info(_func)
