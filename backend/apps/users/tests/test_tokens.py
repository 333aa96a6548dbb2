from types import SimpleNamespace

from django.test import SimpleTestCase

from apps.users.tokens import ALL_SCOPES, parse_scopes, token_can, token_scopes, unknown_scopes


class ScopeParsingTestCase(SimpleTestCase):

    def test_empty_means_all(self):
        self.assertEqual(parse_scopes(""), [ALL_SCOPES])
        self.assertEqual(parse_scopes(None), [ALL_SCOPES])
        self.assertEqual(parse_scopes("   "), [ALL_SCOPES])

    def test_space_separated(self):
        self.assertEqual(parse_scopes("view-teams  manage-teams"), ["view-teams", "manage-teams"])

    def test_list_input(self):
        self.assertEqual(parse_scopes(["view-invoices", ""]), ["view-invoices"])

    def test_unknown_scopes(self):
        self.assertEqual(unknown_scopes(["*", "view-teams", "admin"]), ["admin"])


class TokenCanTestCase(SimpleTestCase):

    def _request(self, scopes):
        return SimpleNamespace(auth={"scopes": scopes})

    def test_wildcard_grants_everything(self):
        self.assertTrue(token_can(self._request(["*"]), "manage-subscriptions"))

    def test_exact_scope(self):
        request = self._request(["view-teams"])
        self.assertTrue(token_can(request, "view-teams"))
        self.assertFalse(token_can(request, "manage-teams"))

    def test_no_token(self):
        self.assertFalse(token_can(SimpleNamespace(auth=None), "view-teams"))
        self.assertEqual(token_scopes(None), [])
