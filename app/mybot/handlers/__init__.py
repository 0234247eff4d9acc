# -*- coding: utf-8 -*-

from .message_handler import handle_message, PIPELINE_KEY

__all__ = ["handle_message", "PIPELINE_KEY"]
