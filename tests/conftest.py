import json

import pytest

from tests.helpers import SAMPLE_PROFILE


@pytest.fixture
def sample_profile_dict() -> dict:
    return json.loads(SAMPLE_PROFILE.read_text(encoding="utf-8"))
