import logging


class CustomLogFormatter(logging.Formatter):
    """Formatter honoring function and file name overrides.

    When a record carries a `func_name_override` or `file_name_override`
    attribute, as records emitted by `log_decorator` do, the record's
    `funcName` and `filename` are replaced with them so the log names the
    decorated function rather than the decorator. Inline logging calls are
    formatted exactly as by `logging.Formatter`.
    """

    def format(self, record):
        if hasattr(record, "func_name_override"):
            record.funcName = record.func_name_override
        if hasattr(record, "file_name_override"):
            record.filename = record.file_name_override
        return super(CustomLogFormatter, self).format(record)
