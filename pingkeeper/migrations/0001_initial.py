import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='PingbackHistory',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('domain', models.CharField(max_length=255)),
                ('source_url', models.URLField(max_length=2048)),
                ('source_url_hash', models.CharField(editable=False, max_length=64)),
                ('source_title', models.TextField(blank=True)),
                ('target_post_id', models.CharField(db_index=True, max_length=64)),
                ('target_post_title', models.TextField(blank=True)),
                ('source_ip', models.CharField(blank=True, max_length=45)),
                ('ping_time_utc', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'pingback',
                'verbose_name_plural': 'pingback history',
                'ordering': ['-ping_time_utc'],
            },
        ),
        migrations.AddConstraint(
            model_name='pingbackhistory',
            constraint=models.UniqueConstraint(fields=('target_post_id', 'source_url_hash', 'source_ip'), name='unique_pingback_source_target_ip'),
        ),
    ]
