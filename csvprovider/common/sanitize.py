from __future__ import annotations


def truncateText(value: str | None, limit: int = 500) -> str | None:
    """
    Назначение:
        Ограничивает длину текста, чтобы тело ответа или CSV-фрагмент не раздували логи.

    Входные данные:
        value: str | None
            Текст для усечения.
        limit: int
            Максимально допустимая длина строки.

    Выходные данные:
        str | None
            Строка, не длиннее limit символов; None, если вход None.
    """
    if value is None:
        return None
    if len(value) <= limit:
        return value
    suffix = "..." if limit > 3 else ""
    head = limit - len(suffix)
    return value[:head] + suffix


def maskUrlCredentials(url: str) -> str:
    """
    Назначение:
        Скрывает user:password в URL перед записью в лог.
    """
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    authority, slash, tail = rest.partition("/")
    if "@" not in authority:
        return url
    host = authority.rsplit("@", 1)[1]
    return f"{scheme}://***@{host}{slash}{tail}"
