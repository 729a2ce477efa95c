"""Typed application keys shared by the app factory and the routes."""

from aiohttp import web

from carrots.core.service import ReleaseService

CONFIG_KEY = web.AppKey("config", dict)
SERVICE_KEY = web.AppKey("service", ReleaseService)
