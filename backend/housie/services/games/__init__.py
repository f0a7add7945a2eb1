"""Game domain services: tickets, session registry, timers and the game manager.

This package contains the room state machine and its helpers. Socket handlers
and HTTP routes call into ``manager.game_manager``; nothing in here knows about
Socket.IO packets or HTTP requests.
"""
