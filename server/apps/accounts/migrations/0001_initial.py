import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import server.apps.accounts.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Account',
            fields=[
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='account', serialize=False, to=settings.AUTH_USER_MODEL)),
                ('uid', models.CharField(default=server.apps.accounts.models.generate_account_uid, editable=False, help_text='Opaque account id, storage prefix: {uid}/file.ext', max_length=64, unique=True)),
                ('is_admin', models.BooleanField(default=False, help_text='Administrator claim')),
                ('has_tier_access', models.BooleanField(default=False, help_text='Cold tier access claim')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Account',
                'verbose_name_plural': 'Accounts',
                'ordering': ['user_id'],
            },
        ),
    ]
