"""
Tests for secret hashing, code generation and the secret strength policy.
"""
import unittest
from unittest.mock import patch

from campus_recovery.errors import WeakSecret
from campus_recovery.security.codes import generate_code
from campus_recovery.security.hashing import MAX_SECRET_BYTES, hash_secret, verify_secret
from campus_recovery.security.policy import check_secret, validate_secret


# Test constants
TEST_SECRET = "Abcdef1!"
TEST_ROUNDS = 4


class TestHashing(unittest.TestCase):
    """Test bcrypt hashing of secrets and codes."""

    def test_hash_is_bcrypt_and_not_plaintext(self):
        digest = hash_secret(TEST_SECRET, rounds=TEST_ROUNDS)

        self.assertTrue(digest.startswith("$2"))
        self.assertNotIn(TEST_SECRET, digest)
        self.assertTrue(verify_secret(TEST_SECRET, digest))

    def test_hash_uses_fresh_salt(self):
        """
        Test that hashing the same secret twice gives different digests.

        Verifies both digests still verify the secret.
        """
        first = hash_secret("123456", rounds=TEST_ROUNDS)
        second = hash_secret("123456", rounds=TEST_ROUNDS)

        self.assertNotEqual(first, second)
        self.assertTrue(verify_secret("123456", first))
        self.assertTrue(verify_secret("123456", second))

    def test_rounds_are_encoded_in_digest(self):
        digest = hash_secret(TEST_SECRET, rounds=TEST_ROUNDS)
        self.assertEqual(digest.split('$')[2], "04")

    def test_wrong_secret_does_not_verify(self):
        digest = hash_secret(TEST_SECRET, rounds=TEST_ROUNDS)
        self.assertFalse(verify_secret("Abcdef1?", digest))

    def test_empty_secret_cannot_be_hashed(self):
        with self.assertRaises(ValueError):
            hash_secret("")

    def test_verify_handles_missing_input(self):
        digest = hash_secret(TEST_SECRET, rounds=TEST_ROUNDS)

        self.assertFalse(verify_secret("", digest))
        self.assertFalse(verify_secret(TEST_SECRET, None))

    def test_verify_handles_corrupt_digest(self):
        self.assertFalse(verify_secret(TEST_SECRET, "not-a-bcrypt-hash"))

    def test_long_secret_is_truncated_consistently(self):
        long_secret = "A" * MAX_SECRET_BYTES + "tail"
        digest = hash_secret(long_secret, rounds=TEST_ROUNDS)

        self.assertTrue(verify_secret(long_secret, digest))
        self.assertTrue(verify_secret("A" * MAX_SECRET_BYTES, digest))


class TestGenerateCode(unittest.TestCase):
    """Test one-time code generation."""

    def test_default_code_is_six_digits(self):
        for _ in range(50):
            code = generate_code()
            self.assertEqual(len(code), 6)
            self.assertTrue(code.isdigit())

    def test_custom_length(self):
        self.assertEqual(len(generate_code(8)), 8)

    @patch('campus_recovery.security.codes.secrets.randbelow', return_value=0)
    def test_leading_zeros_are_kept(self, mock_randbelow):
        """
        Test that codes are zero-padded digit strings, not integers.
        """
        self.assertEqual(generate_code(), "000000")
        self.assertEqual(mock_randbelow.call_count, 6)
        mock_randbelow.assert_called_with(10)

    def test_invalid_length(self):
        with self.assertRaises(ValueError):
            generate_code(0)


class TestSecretPolicy(unittest.TestCase):
    """Test the minimum-strength policy."""

    def test_strong_secret_passes(self):
        self.assertEqual(validate_secret(TEST_SECRET), [])
        check_secret(TEST_SECRET)

    def test_each_rule_is_reported(self):
        """
        Test that every violated rule appears in the error list.

        Verifies each single-rule violation yields exactly one message.
        """
        cases = {
            "Abcde1!": "at least 8 characters",
            "ABCDEF1!": "lowercase",
            "abcdef1!": "uppercase",
            "Abcdefg!": "number",
            "Abcdefg1": "special character",
            "Abcdef1!#": "may only contain",
        }
        for secret, fragment in cases.items():
            with self.subTest(secret=secret):
                errors = validate_secret(secret)
                self.assertEqual(len(errors), 1)
                self.assertIn(fragment, errors[0])

    def test_empty_secret_reports_everything_missing(self):
        errors = validate_secret("")
        self.assertEqual(len(errors), 5)

    def test_check_secret_raises_weak_secret(self):
        with self.assertRaises(WeakSecret) as ctx:
            check_secret("password")

        self.assertEqual(ctx.exception.code, "weak_secret")
        self.assertEqual(len(ctx.exception.errors), 3)
        self.assertEqual(ctx.exception.message, "; ".join(ctx.exception.errors))


if __name__ == '__main__':
    unittest.main()
