from chirpy.models.user import User
from chirpy.models.auth import RefreshToken
from chirpy.models.chirp import Chirp


__all__ = [
    "User",
    "RefreshToken",
    "Chirp",
]
