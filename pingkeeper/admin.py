# -*- coding:utf-8 -*-
from django.contrib import admin

from .models import PingbackHistory

@admin.register(PingbackHistory)
class PingbackHistoryAdmin(admin.ModelAdmin):
    list_display = ['domain', 'source_title', 'target_post_title', 'source_ip', 'ping_time_utc']
    list_filter = ['domain']
    search_fields = ['source_url', 'source_title', 'target_post_title']
    readonly_fields = [f.name for f in PingbackHistory._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
