from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ColdFileRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('account_id', models.CharField(db_index=True, help_text='Owner account id (key prefix)', max_length=64)),
                ('file_name', models.CharField(max_length=512)),
                ('url', models.CharField(help_text='Location of the object in the cold bucket', max_length=2048)),
                ('archived_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Cold file record',
                'verbose_name_plural': 'Cold file records',
                'ordering': ['account_id', 'file_name'],
                'constraints': [models.UniqueConstraint(fields=('account_id', 'file_name'), name='cold_records_account_file_unique')],
            },
        ),
    ]
