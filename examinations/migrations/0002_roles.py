from django.db import migrations, models


HIERARCHY = ['admin', 'lecturer', 'student']


def copy_single_role(apps, schema_editor):
    Role = apps.get_model('examinations', 'Role')
    UserProfile = apps.get_model('examinations', 'UserProfile')
    roles = {name: Role.objects.get_or_create(name=name)[0] for name in HIERARCHY}
    for profile in UserProfile.objects.all():
        start = HIERARCHY.index(profile.role) if profile.role in HIERARCHY else len(HIERARCHY) - 1
        profile.roles.set([roles[name] for name in HIERARCHY[start:]])


class Migration(migrations.Migration):

    dependencies = [
        ('examinations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Role',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(choices=[('admin', 'Admin'), ('lecturer', 'Lecturer'), ('student', 'Student')], max_length=20, unique=True)),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.AddField(
            model_name='userprofile',
            name='roles',
            field=models.ManyToManyField(blank=True, related_name='profiles', to='examinations.role'),
        ),
        migrations.RunPython(copy_single_role, migrations.RunPython.noop),
    ]
