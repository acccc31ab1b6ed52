from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='NotificationSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('super_admin_email', models.EmailField(blank=True, default='', max_length=254)),
                ('admin_emails', models.JSONField(blank=True, default=list, help_text='List of admin email addresses.')),
                ('notifications_enabled', models.BooleanField(default=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'notification_settings',
                'verbose_name_plural': 'notification settings',
            },
        ),
    ]
