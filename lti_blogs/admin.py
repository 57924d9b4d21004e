"""
Admin views for LTI blog models.
"""
from config_models.admin import ConfigurationModelAdmin
from django.contrib import admin

from lti_blogs.models import Blog, BlogMembership, LtiBlogsConfiguration, LtiToolConsumer


class LtiToolConsumerAdmin(admin.ModelAdmin):
    """
    Admin view for LtiToolConsumer models.
    """
    list_display = ('name', 'consumer_key', 'enabled', 'enable_from', 'enable_until')
    search_fields = ['name', 'consumer_key']


class BlogMembershipInline(admin.TabularInline):
    model = BlogMembership
    raw_id_fields = ('user',)
    extra = 0


class BlogAdmin(admin.ModelAdmin):
    """
    Admin view for Blog models.

    The placement fields are read-only: changing them would detach the blog from its LTI placement.
    """
    list_display = ('title', 'path', 'blog_type', 'course_id', 'resource_link_id', 'creator', 'version')
    list_filter = ('blog_type',)
    search_fields = ['title', 'path', 'course_id']
    readonly_fields = ('course_id', 'resource_link_id', 'blog_type', 'creator', 'version')
    inlines = [BlogMembershipInline]


admin.site.register(LtiToolConsumer, LtiToolConsumerAdmin)
admin.site.register(Blog, BlogAdmin)
admin.site.register(BlogMembership)
admin.site.register(LtiBlogsConfiguration, ConfigurationModelAdmin)
