from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.tests.factories import make_user
from users.models import DistributorProfile, TransporterProfile, User


class UserModelTests(TestCase):
    """
    GUARANTEES:
    - one account table, role-specific data in profile variants
    - a profile can only attach to an account of its role
    """

    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(email="Grower@Example.COM", password="pass", role=User.ROLE_FARMER)
        self.assertEqual(user.email, "Grower@example.com")
        self.assertTrue(user.check_password("pass"))

    def test_email_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="pass", role=User.ROLE_FARMER)

    def test_unknown_role_rejected(self):
        with self.assertRaises(ValidationError):
            User.objects.create_user(email="x@example.com", password="pass", role="shopkeeper")

    def test_superuser_is_admin(self):
        admin = User.objects.create_superuser(email="root@example.com", password="pass")
        self.assertEqual(admin.role, User.ROLE_ADMIN)
        self.assertTrue(admin.is_staff)

    def test_profile_resolves_by_role(self):
        transporter = make_user(User.ROLE_TRANSPORTER)
        self.assertIsInstance(transporter.profile, TransporterProfile)
        self.assertEqual(transporter.profile.fleet_size, 0)

        bare = make_user(User.ROLE_DISTRIBUTOR, with_profile=False)
        self.assertIsNone(bare.profile)

    def test_profile_role_mismatch(self):
        farmer = make_user(User.ROLE_FARMER, with_profile=False)
        with self.assertRaises(ValidationError):
            DistributorProfile.objects.create(user=farmer, business_name="X", business_reg_number="1")


class MeEndpointTests(TestCase):
    def test_me_includes_profile(self):
        client = APIClient()
        user = make_user(User.ROLE_DISTRIBUTOR)
        client.force_authenticate(user=user)

        res = client.get("/api/auth/me/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["role"], User.ROLE_DISTRIBUTOR)
        self.assertEqual(res.data["profile"]["business_name"], "Fresh Wholesale")

    def test_me_requires_auth(self):
        res = APIClient().get("/api/auth/me/")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
