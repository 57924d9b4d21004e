from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='LtiToolConsumer',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('consumer_key', models.CharField(help_text='OAuth consumer key sent by the LMS in launches.', max_length=255, unique=True)),
                ('secret', models.CharField(help_text='Shared secret used to sign launches. Keep this value secret.', max_length=255)),
                ('enabled', models.BooleanField(default=True)),
                ('enable_from', models.DateTimeField(blank=True, null=True)),
                ('enable_until', models.DateTimeField(blank=True, null=True)),
                ('created', models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name='Blog',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('path', models.SlugField(max_length=255, unique=True)),
                ('site_category', models.PositiveIntegerField(default=1)),
                ('course_id', models.CharField(db_index=True, max_length=255)),
                ('resource_link_id', models.CharField(max_length=255)),
                ('blog_type', models.CharField(choices=[('course', 'Course blog'), ('student', 'Student blog')], max_length=20)),
                ('version', models.PositiveIntegerField(default=1)),
                ('created', models.DateTimeField(auto_now_add=True)),
                ('creator', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='lti_blogs', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='BlogMembership',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(choices=[('administrator', 'Administrator'), ('editor', 'Editor'), ('author', 'Author'), ('contributor', 'Contributor'), ('subscriber', 'Subscriber')], max_length=20)),
                ('modified', models.DateTimeField(auto_now=True)),
                ('blog', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='lti_blogs.blog')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lti_blog_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'unique_together': {('blog', 'user')},
            },
        ),
        migrations.CreateModel(
            name='LtiBlogsConfiguration',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('change_date', models.DateTimeField(auto_now_add=True, verbose_name='Change date')),
                ('enabled', models.BooleanField(default=False, verbose_name='Enabled')),
                ('helpline_url', models.URLField(blank=True, help_text='Support page users are sent to when their account cannot be created.')),
                ('default_site_category', models.PositiveIntegerField(default=1, help_text='Category of new blogs when the launch does not send custom_site_category.')),
                ('changed_by', models.ForeignKey(editable=False, null=True, on_delete=django.db.models.deletion.PROTECT, to=settings.AUTH_USER_MODEL, verbose_name='Changed by')),
            ],
            options={
                'ordering': ('-change_date',),
                'abstract': False,
            },
        ),
        migrations.AddConstraint(
            model_name='blog',
            constraint=models.UniqueConstraint(condition=models.Q(('blog_type', 'course')), fields=('course_id', 'resource_link_id'), name='lti_blogs_unique_course_blog'),
        ),
        migrations.AddConstraint(
            model_name='blog',
            constraint=models.UniqueConstraint(condition=models.Q(('blog_type', 'student')), fields=('course_id', 'resource_link_id', 'creator'), name='lti_blogs_unique_student_blog'),
        ),
    ]
