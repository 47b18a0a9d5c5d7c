"""
Position Indicator.

Tracks the player's current target and shows whether it is out of melee
range, in melee range facing the player, or in melee range with the player
behind it. Changes between the three images crossfade.
"""

__version__ = "1.0.0"
