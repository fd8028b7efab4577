from __future__ import annotations

import pytest

from factories import make_holder, make_policy
from lifeval_app.models.policy import Policy, PolicyHolder


@pytest.fixture
def policy() -> Policy:
    return make_policy()


@pytest.fixture
def holder() -> PolicyHolder:
    return make_holder()
