"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    UserHandlers
    - POST   /users       create a user
    - GET    /user/:id    read one user
    - GET    /users       read all users
    - PUT    /users/:id   update a user
    - DELETE /users/:id   delete a user

    handlers = UserHandlers(store)
    handlers.register(router)

=============================================================================
"""

from .users import UserHandlers

__all__ = ["UserHandlers"]
