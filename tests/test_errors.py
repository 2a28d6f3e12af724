import pickle

import pytest

from steam_openid.errors import ERRORS_BY_KIND, ErrorKind, NetworkError, NonceOutOfSkew, SteamOpenIdError


def test_every_kind_has_its_own_class():
    assert set(ERRORS_BY_KIND) == set(ErrorKind)
    assert len(ErrorKind) == 19
    for kind, cls in ERRORS_BY_KIND.items():
        assert cls.__name__ == kind.value


def test_error_carries_kind_and_message():
    err = NonceOutOfSkew("too old")
    assert err.kind is ErrorKind.NONCE_OUT_OF_SKEW
    assert err.message == "too old"
    assert str(err) == "NonceOutOfSkew: too old"

    with pytest.raises(SteamOpenIdError):
        raise err


def test_network_error_status_code():
    assert NetworkError("boom").status_code is None
    assert NetworkError("Network error: 502", status_code=502).status_code == 502


def test_network_error_survives_pickling():
    err = pickle.loads(pickle.dumps(NetworkError("Network error: 502", status_code=502)))
    assert isinstance(err, NetworkError)
    assert err.status_code == 502
    assert err.message == "Network error: 502"
