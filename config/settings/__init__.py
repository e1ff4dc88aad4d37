"""Settings package for the FlyNext project.

``base`` holds everything shared; ``dev``, ``prod`` and ``test`` override
it per environment. ``DJANGO_SETTINGS_MODULE`` defaults to ``dev``.
"""
