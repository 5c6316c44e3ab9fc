from dataclasses import dataclass, field
from enum import IntEnum

from rich.pretty import pprint

from recli import *


class Auth(TextCodec, IntEnum):
    STATIC = 1
    LDAP = 2


@dataclass
class Backend:
    hostname: str = field(default="", metadata={"recli": "id", "usage": "Backend host name"})
    port: UInt16 = field(default=0, metadata={"default": "2019", "usage": "Backend port"})


@dataclass
class Proxy:
    ListenAddress: str = field(default=":8080", metadata={"usage": "Address to listen on"})
    auth: Auth = Auth.STATIC
    headers: dict[str, str] = field(default_factory=dict)
    backends: list[Backend] = field(default_factory=lambda: [Backend("b1.com", 2019)])
    _secret: str = "hidden"


if __name__ == '__main__':
    proxy = Proxy()
    commands = construct(proxy)
    pprint(commands, max_depth=3)
    invoke(commands, prog="proxy", shell=True, fancy=True)
