from django.apps import AppConfig  # type: ignore


class BookingsConfig(AppConfig):
    name = "apps.bookings"
    label = "bookings"
    verbose_name = "Bookings"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .handlers import register_handlers

        register_handlers(message_bus)
