from . import (
    auth as auth,
    friends as friends,
    health as health,
    messages as messages,
    websocket as websocket,
)
