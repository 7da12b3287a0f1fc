import logging

import pytest

from techshare.domain import (
    CloneAfterSetupError,
    GlobalTechnology,
    OwnedParameters,
    SharedParameters,
    TechnologyInfo,
)


def test_complete_init_keeps_valid_parameters():
    info = TechnologyInfo("coal", fuel_name="coal", efficiency=0.4, efficiency_penalty=0.1)

    info.complete_init()

    assert info.efficiency == 0.4
    assert info.efficiency_penalty == 0.1


def test_complete_init_resets_invalid_efficiency(caplog):
    info = TechnologyInfo("coal", efficiency=0.0)

    with caplog.at_level(logging.ERROR):
        info.complete_init()

    assert info.efficiency == 1.0
    assert "invalid efficiency" in caplog.text


@pytest.mark.parametrize("penalty", [-0.1, 1.0, 1.5])
def test_complete_init_resets_invalid_efficiency_penalty(penalty, caplog):
    info = TechnologyInfo("coal", efficiency_penalty=penalty)

    with caplog.at_level(logging.ERROR):
        info.complete_init()

    assert info.efficiency_penalty == 0.0
    assert "invalid efficiency penalty" in caplog.text


def test_owned_parameters_clone_is_deep():
    owned = OwnedParameters(TechnologyInfo("coal", efficiency=0.4))

    cloned = owned.clone()
    cloned.info.efficiency = 0.9

    assert owned.info.efficiency == 0.4
    assert not cloned.is_shared


def test_shared_parameters_cannot_be_cloned():
    shared = SharedParameters(GlobalTechnology("coal", year=2005))

    assert shared.is_shared
    with pytest.raises(CloneAfterSetupError):
        shared.clone()
