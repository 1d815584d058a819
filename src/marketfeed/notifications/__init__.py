from marketfeed.notifications.center import Notification, NotificationCenter, NotificationEvent

__all__ = ["Notification", "NotificationCenter", "NotificationEvent"]
