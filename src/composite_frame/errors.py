class CompositeFrameError(Exception): ...


class SchemaError(CompositeFrameError):
    '''
    Column / name count mismatch, duplicate names, or values that can't be
    stored as a single typed column.

    '''


class FrameIndexError(CompositeFrameError, IndexError):
    '''
    Unknown column name, out of range row / column position or a boolean
    mask whose length doesn't match the frame.

    '''


class DimensionError(CompositeFrameError):
    '''
    Columns with unequal row counts were combined.

    '''


class OrderError(CompositeFrameError):
    '''
    Sort key relation row count doesn't match the frame being ordered.

    '''


class ConfigError(CompositeFrameError): ...
