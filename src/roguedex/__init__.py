"""Run-state and progression engine for a creature-collecting roguelike card battler."""

__version__ = "0.1.0"
