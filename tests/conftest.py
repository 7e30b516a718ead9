from __future__ import annotations

import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

load_dotenv(dotenv_path=ROOT / ".env", override=False)

from dm_tree.reconcile import build_tree_from_messages  # noqa: E402
from tests.helpers import conversation  # noqa: E402


@pytest.fixture
def linear_tree():
    return build_tree_from_messages(conversation("u1", "a1", "u2", "a2"), "topic-1")
