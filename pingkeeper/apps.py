# -*- coding:utf-8 -*-
from django.apps import AppConfig

class PingkeeperConfig(AppConfig):
    name = 'pingkeeper'
    verbose_name = 'Pingbacks'
    default_auto_field = 'django.db.models.AutoField'
