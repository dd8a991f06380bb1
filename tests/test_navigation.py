import unittest
from unittest.mock import MagicMock, patch

from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from pytrips.config.settings import config
from pytrips.core.enums import NavigationState
from pytrips.core.models import CandidateRegion
from pytrips.core.navigation import NavigationController
from pytrips.exceptions import NetworkError
from pytrips.utils.polling import attempts_for

HOME_URL = "https://www.marriott.com/default.mi"
DETAIL_URL = "https://www.marriott.com/reservation/reservationDetail.mi?confirmationNumber=81234567"


def make_region():
    element = BeautifulSoup('<div class="trip-card">Courtyard</div>', "html.parser").div
    return CandidateRegion(index=0, element=element, strategy="structural", selector="div:nth-of-type(1)")


class TestNavigationController(unittest.TestCase):

    def setUp(self):
        self.page = MagicMock()
        self.page.url = HOME_URL
        self.sleep = MagicMock()
        self.navigator = NavigationController(self.page, sleep=self.sleep)

    def test_has_document(self):
        self.assertTrue(self.navigator.has_document())
        self.page.url = "about:blank"
        self.assertFalse(self.navigator.has_document())

    def test_is_at_list_page_ignores_query_string(self):
        self.assertFalse(self.navigator.is_at_list_page())
        self.page.url = config.reservations_url + "?tab=upcoming"
        self.assertTrue(self.navigator.is_at_list_page())

    def test_go_to_list_page_navigates_and_waits_for_content(self):
        self.page.query_selector.return_value = object()

        self.assertTrue(self.navigator.go_to_list_page())

        self.page.goto.assert_called_once_with(
            config.reservations_url, wait_until="domcontentloaded", timeout=config.PAGE_LOAD_TIMEOUT
        )
        self.page.wait_for_load_state.assert_called_once()
        self.sleep.assert_called_once_with(config.PAGE_LOAD_SETTLE)
        self.assertEqual(self.navigator.state, NavigationState.LIST_PAGE)

    def test_content_timeout_degrades(self):
        self.page.url = config.reservations_url
        self.page.query_selector.return_value = None

        self.assertFalse(self.navigator.go_to_list_page())

        self.page.goto.assert_not_called()
        expected = attempts_for(config.LIST_CONTENT_TIMEOUT, config.POLL_INTERVAL) - 1
        self.assertEqual(self.sleep.call_count, expected)
        self.assertEqual(self.navigator.state, NavigationState.LIST_PAGE)

    def test_navigation_timeout_continues(self):
        self.page.goto.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded")
        self.page.query_selector.return_value = object()
        self.assertTrue(self.navigator.go_to_list_page())

    def test_navigation_error_raises_network_error(self):
        self.page.goto.side_effect = PlaywrightError("net::ERR_INTERNET_DISCONNECTED")
        with self.assertRaises(NetworkError):
            self.navigator.go_to_list_page()

    def test_is_expanded_by_aria_attribute(self):
        locator = self.page.locator.return_value.first
        locator.get_attribute.side_effect = lambda name, **kwargs: "true" if name == "aria-expanded" else None

        self.assertTrue(self.navigator.is_expanded(make_region()))
        self.page.locator.assert_called_with("div:nth-of-type(1)")

    def test_region_queries_use_short_timeout(self):
        locator = self.page.locator.return_value.first
        locator.get_attribute.side_effect = PlaywrightTimeoutError("Timeout 500ms exceeded")
        locator.evaluate.side_effect = PlaywrightTimeoutError("Timeout 500ms exceeded")
        expected_timeout = int(config.POLL_INTERVAL * 1000)

        self.assertFalse(self.navigator.is_expanded(make_region()))
        self.assertIsNone(self.navigator.capture_region_html(make_region()))

        locator.get_attribute.assert_called_once_with("aria-expanded", timeout=expected_timeout)
        locator.evaluate.assert_called_once_with("el => el.outerHTML", timeout=expected_timeout)

    def test_detail_action_ignores_unrelated_view_links(self):
        scope = MagicMock()
        scope.locator.return_value.count.return_value = 0
        by_text = scope.locator.return_value.filter.return_value
        by_text.count.return_value = 1

        self.assertIs(self.navigator.find_detail_action(scope), by_text.first)
        requested = [call.args[0] for call in scope.locator.call_args_list]
        self.assertNotIn('a[href*="view"]', requested)

    def test_expand_panel_already_expanded(self):
        with patch.object(self.navigator, "is_expanded", return_value=True):
            self.assertTrue(self.navigator.expand_panel(make_region()))
        self.assertEqual(self.navigator.state, NavigationState.PANEL_EXPANDED)

    def test_expand_panel_clicks_toggle(self):
        toggle = MagicMock()
        with patch.object(self.navigator, "is_expanded", side_effect=[False, False, True]), \
                patch.object(self.navigator, "_find_toggle", return_value=toggle):
            self.assertTrue(self.navigator.expand_panel(make_region()))

        toggle.click.assert_called_once()
        self.sleep.assert_any_call(config.PANEL_SETTLE_DELAY)
        self.assertEqual(self.navigator.state, NavigationState.PANEL_EXPANDED)

    def test_expand_panel_without_toggle(self):
        with patch.object(self.navigator, "is_expanded", return_value=False), \
                patch.object(self.navigator, "_find_toggle", return_value=None):
            self.assertFalse(self.navigator.expand_panel(make_region()))
        self.assertEqual(self.navigator.state, NavigationState.PANEL_COLLAPSED)

    def test_open_detail_waits_for_url_change(self):
        action = MagicMock()
        action.click.side_effect = lambda **kwargs: setattr(self.page, "url", DETAIL_URL)

        with patch.object(self.navigator, "find_detail_action", return_value=action):
            self.assertTrue(self.navigator.open_detail(make_region()))

        self.assertEqual(self.navigator.current_url, DETAIL_URL)
        self.assertEqual(self.navigator.state, NavigationState.DETAIL_PAGE)

    def test_open_detail_without_action(self):
        with patch.object(self.navigator, "find_detail_action", return_value=None):
            self.assertFalse(self.navigator.open_detail(make_region()))
        expected = attempts_for(config.DETAIL_ACTION_TIMEOUT, config.POLL_INTERVAL) - 1
        self.assertEqual(self.sleep.call_count, expected)

    def test_open_detail_url_never_changes(self):
        action = MagicMock()
        with patch.object(self.navigator, "find_detail_action", return_value=action):
            self.assertFalse(self.navigator.open_detail(make_region()))
        action.click.assert_called_once()
        self.assertNotEqual(self.navigator.state, NavigationState.DETAIL_PAGE)

    def test_return_to_list_falls_back_to_direct_navigation(self):
        self.page.url = DETAIL_URL
        self.page.go_back.side_effect = PlaywrightError("no history")
        self.page.query_selector.return_value = object()

        self.assertTrue(self.navigator.return_to_list())

        self.page.goto.assert_called_once()
        self.assertEqual(self.navigator.state, NavigationState.LIST_PAGE)


if __name__ == '__main__':
    unittest.main()
