# ewsplumbing/credentials.py
"""
Credentials that know how to authenticate an outgoing request.

Each credential type carries its own secret material and a certify() method
that writes the matching transport options onto a pending HttpRequest. The
request never inspects credentials itself, so supporting another scheme
means adding a subclass here and nothing else.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ewsplumbing.transport import AuthMode, TransportOption

if TYPE_CHECKING:
    from ewsplumbing.http_request import HttpRequest


class Credentials(BaseModel, ABC):
    """
    Abstract base class for request authentication.

    Subclasses must implement certify(), which mutates the given request and
    must not mutate the credentials.
    """

    model_config = ConfigDict(frozen=True)

    @abstractmethod
    def certify(self, request: 'HttpRequest') -> None:
        """
        Add authentication material to a pending request.

        Args:
            request: The request to authenticate. Must not be None.
        """
        pass


class NtlmCredentials(Credentials):
    """
    Windows domain login negotiated with NTLM.

    The login handed to the transport has the form 'DOMAIN\\username:password'.

    Attributes:
        username: The account name, without the domain.
        password: The plain-text password, kept as SecretStr so it never
                  appears in repr() output or logs.
        domain: The Windows domain of the account.
    """

    username: str = Field(..., min_length=1, description='Account name')
    password: SecretStr = Field(..., description='Account password')
    domain: str = Field(default='', description='Windows domain')

    def certify(self, request: 'HttpRequest') -> None:
        if request is None:
            raise ValueError('certify() needs a request to authenticate')

        login: str = f'{self.domain}\\{self.username}:{self.password.get_secret_value()}'
        request.set_option(TransportOption.USERPWD, login)
        request.set_option(TransportOption.HTTPAUTH, AuthMode.NTLM)
