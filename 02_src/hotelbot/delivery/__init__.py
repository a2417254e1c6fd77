"""Delivery module."""

from .dispatcher import Dispatcher, IDispatcher, Sender, WebhookSender

__all__ = ["Dispatcher", "IDispatcher", "Sender", "WebhookSender"]
