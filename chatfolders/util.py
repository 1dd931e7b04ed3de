# -*- coding: utf-8 -*-
from typing import Optional


def to_bool(s: str) -> bool:
    if s.lower() in ("false", "f", "no", "n", "off", "0", "none", ""):
        return False
    return True


def humanized_list(list_: list, kind: str = "chats") -> Optional[str]:
    if not list_:
        return None
    if len(list_) == 1:
        return list_[0]
    if len(list_) == 2:
        return " and ".join(list_)
    if len(list_) == 3:
        return "{}, {}, and {}".format(*list_)
    return "{}, {}, and {} other {}".format(
        list_[0], list_[1], len(list_) - 2, kind
    )
