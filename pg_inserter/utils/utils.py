import typing


def join_names(columns: typing.List[str], delimiter: str = ", "):
    return delimiter.join(columns)


def quote_ident(name: str):
    return '"' + name.replace('"', '""') + '"'
