"""
Test configuration for Monkey interpreter tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import parse_source
from environment import make_environment
from interpreter import evaluate


@pytest.fixture
def run_source():
  """Parse and evaluate source in a fresh root environment"""
  def run(source):
    program, errors = parse_source(source)
    assert errors == [], f"unexpected parse errors: {errors}"
    return evaluate(program, make_environment())
  return run
