"""Users app package.

Defines the custom user model with roles (traveller, hotel owner,
administrator) and the JWT authentication endpoints. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout
the project.
"""
