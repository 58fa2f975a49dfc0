from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ModelArtifact',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('version', models.CharField(max_length=50, unique=True)),
                ('model_file', models.CharField(max_length=500)),
                ('file_hash', models.CharField(max_length=64)),
                ('metadata', models.JSONField(default=dict)),
                ('metrics', models.JSONField(default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Model Artifact',
                'verbose_name_plural': 'Model Artifacts',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
