from typing import Optional

from requests.auth import AuthBase, HTTPBasicAuth


def get_authenticator(username: Optional[str], password: Optional[str]) -> Optional[AuthBase]:
    if username is not None and password is not None:
        return HTTPBasicAuth(username=username, password=password)
    else:
        return None
