class InserterError(Exception):
    pass


class ConfigurationError(InserterError):
    pass


class ConnectivityError(InserterError):
    pass


class ExecutionError(InserterError):
    def __init__(self, message, table_name=None):
        super().__init__(message)
        self.table_name = table_name
