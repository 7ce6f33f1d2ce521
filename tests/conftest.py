import pytest

from helpers.configs import MINI_CONFIG
from helpers.loader import load_yaml, load_rules, load_constants
from triage_rulesets.engine import TriageEngine
from triage_rulesets.ruleset import RulesetStore


@pytest.fixture
def yml():
    return load_yaml

@pytest.fixture(scope="session")
def rules():
    return load_rules()

@pytest.fixture(scope="session")
def consts():
    return load_constants()


@pytest.fixture(scope="session")
def store():
    """Load the bundled RulesetStore once for the entire test session."""
    s = RulesetStore()
    s.load()
    return s


@pytest.fixture
def mini_store():
    """Small in-memory store built without file I/O."""
    return RulesetStore.from_mapping(**MINI_CONFIG)


@pytest.fixture
def engine(mini_store):
    """TriageEngine over the mini store with all delays disabled."""
    return TriageEngine(mini_store, submit_delay=0, analyze_delay=0)
