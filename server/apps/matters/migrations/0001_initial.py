import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import server.apps.matters.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Matter',
            fields=[
                ('uuid', models.CharField(default=server.apps.matters.models.new_uuid, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('parent_uuid', models.CharField(default='root', help_text='Identifier of the containing directory or "root"', max_length=36)),
                ('username', models.CharField(max_length=150)),
                ('is_dir', models.BooleanField(default=False)),
                ('name', models.CharField(max_length=200)),
                ('path', models.CharField(help_text='Path from the user root: /folder/file.ext', max_length=6432)),
                ('size', models.BigIntegerField(default=0, help_text='File size in bytes (not maintained for directories)')),
                ('privacy', models.BooleanField(default=True)),
                ('content_hash', models.CharField(blank=True, default='', max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='matters', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Matter',
                'verbose_name_plural': 'Matters',
                'ordering': ['-is_dir', 'name'],
                'indexes': [
                    models.Index(fields=['user', 'parent_uuid'], name='matters_user_parent_idx'),
                    models.Index(fields=['user', 'path'], name='matters_user_path_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('user', 'parent_uuid', 'is_dir', 'name'), name='matters_sibling_name_unique'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ImageCache',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('mode', models.CharField(help_text='Processing parameters, e.g. resize_fill,w_100,h_100', max_length=512)),
                ('path', models.CharField(help_text='Storage name of the cached artifact', max_length=1024)),
                ('size', models.BigIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('matter', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='image_caches', to='matters.matter')),
            ],
            options={
                'verbose_name': 'Image Cache',
                'verbose_name_plural': 'Image Caches',
            },
        ),
        migrations.CreateModel(
            name='UserQuota',
            fields=[
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='quota', serialize=False, to=settings.AUTH_USER_MODEL)),
                ('size_limit', models.BigIntegerField(default=-1, help_text='Maximum bytes per upload, negative for unlimited')),
            ],
            options={
                'verbose_name': 'User Quota',
                'verbose_name_plural': 'User Quotas',
            },
        ),
    ]
