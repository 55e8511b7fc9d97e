"""
DEMO/TEST/REFERENCE media engine for the Video Player.

This is a simulated media engine that does not decode or render anything.
It is meant as a reference for implementing a real MediaEngineAdapter
(wrapping an actual media framework) and to run the player without one.

It behaves like a real engine from the player's point of view:
the duration resolves after a (short) load delay, position ticks are emitted
while playing, end-of-media is reported when the end is reached and seeks
complete after some latency (or are interrupted by a newer seek).
"""

from __future__ import annotations

from .engine import DemoMediaEngine

__all__ = ["DemoMediaEngine"]
