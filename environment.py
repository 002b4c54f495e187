"""
Monkey runtime environments
Chained name -> value scopes shared between the interpreter and closures
"""

from typing import Dict, Optional


def make_environment(outer: Optional[Dict] = None) -> Dict:
  """Create a scope; the outer link is only ever read through"""
  return {
      'store': {},
      'outer': outer
  }


def make_enclosed_environment(outer: Dict) -> Dict:
  """Create the per-call scope nested inside a function's captured environment"""
  return make_environment(outer)


def env_get(env: Dict, name: str) -> Optional[Dict]:
  """Look up a value in the environment chain"""
  if name in env['store']:
    return env['store'][name]
  elif env['outer'] is not None:
    return env_get(env['outer'], name)
  return None


def env_set(env: Dict, name: str, value: Dict) -> Dict:
  """Bind in the local frame only; outer bindings are shadowed, never written"""
  env['store'][name] = value
  return value


def env_bindings(env: Dict) -> Dict[str, Dict]:
  """Snapshot of the local frame's bindings"""
  return dict(env['store'])
