from django.contrib.auth.models import User
from django.core.management.base import BaseCommand, CommandError

from accounts.models import UserProfile
from accounts.services import check_password_strength, normalize_email
from movies.exceptions import ServiceError

class Command(BaseCommand):
    help = 'Create or reset an administrator account with a confirmed email'

    def add_arguments(self, parser):
        parser.add_argument(
            '--email',
            type=str,
            default='admin@cinemaverse.local',
            help='Admin email (default: admin@cinemaverse.local)'
        )
        parser.add_argument(
            '--password',
            type=str,
            required=True,
            help='Admin password; must pass the configured password validators'
        )
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Reset existing admin user if found'
        )

    def handle(self, *args, **options):
        try:
            email = normalize_email(options['email'])
            check_password_strength(options['password'])
        except ServiceError as e:
            raise CommandError(e.message)

        user = User.objects.filter(email__iexact=email).first()

        if user and not options['reset']:
            self.stdout.write(
                self.style.ERROR(f'❌ User "{email}" already exists!')
            )
            self.stdout.write(
                self.style.WARNING('   Use --reset flag to reset this user\n')
            )
            return

        if user:
            self.stdout.write(self.style.WARNING(f'⚠️  Resetting existing user: {email}'))
        else:
            self.stdout.write(self.style.WARNING(f'⚙️  Creating new admin user: {email}'))
            user = User(username=email, email=email)

        user.set_password(options['password'])
        user.is_staff = True
        user.is_superuser = True
        user.is_active = True
        user.save()

        profile = UserProfile.for_user(user)
        profile.role = 'ADMIN'
        profile.save(update_fields=['role', 'updated_at'])
        if not profile.is_email_confirmed:
            profile.mark_email_confirmed()

        self.stdout.write(self.style.SUCCESS('='*60))
        self.stdout.write(f'  Email:          {email}')
        self.stdout.write(f'  Role:           {profile.role}')
        self.stdout.write(f'  Email Verified: {profile.is_email_confirmed}')
        self.stdout.write(self.style.SUCCESS('='*60))
        self.stdout.write(
            self.style.SUCCESS('✅ Admin user is ready. Log in through /api/auth/login.\n')
        )
