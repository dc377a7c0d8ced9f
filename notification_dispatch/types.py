"""Shared type aliases for the notification dispatch package."""

from __future__ import annotations

from typing import Any, Callable, Mapping

RawRequest = Mapping[str, Any]
MessageBody = dict[str, Any]
ChannelResult = dict[str, Any]
QueueAttributes = dict[str, str]
QueueEntry = dict[str, Any]
QueueAck = dict[str, Any]

SendEmailFn = Callable[..., bool]
SendSMSFn = Callable[..., bool]
SendPushFn = Callable[..., bool]
