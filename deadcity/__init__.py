"""Lets ``python -m deadcity.main`` work from a plain checkout without installing.

The real package lives in ``src/deadcity``; this stub points its search path
there and runs the real ``__init__`` in place.
"""
from __future__ import annotations

from pathlib import Path

_SRC_PACKAGE = Path(__file__).resolve().parents[1] / "src" / "deadcity"
__path__ = [str(_SRC_PACKAGE)]
__file__ = str(_SRC_PACKAGE / "__init__.py")

exec(compile(Path(__file__).read_text(encoding="utf-8"), __file__, "exec"), globals(), globals())
