"""End-to-end assessments against an in-memory website."""
import httpx
import pytest

from crewguard.checker import base_url_of, check_site
from crewguard.models import FindingKind

from conftest import CLEAN_HTML, finding_kinds, html, plain, site_transport

K = FindingKind


def run(routes, url="https://example.com/some/page?q=1", **kwargs):
    return check_site(url, transport=site_transport(routes), **kwargs)


class TestBaseUrl:
    def test_path_and_query_dropped(self):
        assert base_url_of("https://Example.com/a/b?c=d#e") == "https://example.com"

    def test_port_kept_unless_default(self):
        assert base_url_of("http://example.com:8080/x") == "http://example.com:8080"
        assert base_url_of("https://example.com:443/x") == "https://example.com"

    def test_idn_host_in_ascii_form(self):
        assert base_url_of("https://Bücher.de/katalog") == "https://xn--bcher-kva.de"

    def test_ipv6_host_bracketed(self):
        assert base_url_of("http://[::1]:8080/x") == "http://[::1]:8080"

    @pytest.mark.parametrize(
        "bad",
        [
            "",
            "example.com",
            "ftp://example.com",
            "https://",
            "http://host:notaport/",
            "https://exa mple.com/",
            "https://exa<mple.com/",
            "https://exa\"mple.com/",
            "http://[zz::1]/",
        ],
    )
    def test_invalid_urls_raise_before_network(self, bad):
        def explode(request):
            raise AssertionError("network must not be touched")

        with pytest.raises(ValueError):
            check_site(bad, transport=httpx.MockTransport(explode))


class TestUnreachable:
    def test_blocked_with_single_finding(self):
        report = run({"/": httpx.ConnectError, "/robots.txt": plain("User-agent: *\n")})
        assert report.verdict == "blocked"
        assert finding_kinds(report) == [K.UNREACHABLE]
        assert report.legal_risk == report.social_risk == report.technical_risk == ()
        assert report.suggestions == ()

    def test_timeout_is_unreachable(self):
        report = run({"/": httpx.ReadTimeout})
        assert report.verdict == "blocked"
        assert report.report == ["❌ Site unreachable"]


class TestCleanSite:
    def test_allowed(self, clean_routes):
        report = run(clean_routes)
        assert report.verdict == "allowed"
        assert report.base_url == "https://example.com"
        assert finding_kinds(report) == [
            K.STATUS_CODE,
            K.SITE_ACCESSIBLE,
            K.ROBOTS_PARSED,
            K.ROBOTS_NO_DISALLOWED,
            K.ROBOTS_ALLOWED_HEADER,
            K.ROBOTS_ALLOWED_PATH,
            K.NO_API_ENDPOINTS,
        ]
        assert report.legal_risk == report.social_risk == report.technical_risk == ()
        assert "Review site terms regularly" in report.suggestions[0]
        assert "Maintain ethical standards" in report.suggestions[1]
        assert "Monitor crawler health" in report.suggestions[2]
        assert "obey robots.txt" in report.suggestions[3]

    def test_idn_site_is_not_a_redirect(self, clean_routes):
        report = run(clean_routes, url="https://bücher.de/")
        assert report.verdict == "allowed"
        assert report.base_url == "https://xn--bcher-kva.de"
        assert K.REDIRECT not in finding_kinds(report)
        assert report.technical_risk == ()

    def test_robots_without_disallow_lines_is_allowed(self, clean_routes):
        clean_routes["/robots.txt"] = plain("User-agent: *\n")
        report = run(clean_routes)
        assert report.verdict == "allowed"
        assert K.ROBOTS_NO_DISALLOWED in finding_kinds(report)
        assert report.legal_risk == report.social_risk == report.technical_risk == ()

    def test_empty_disallow_value_reads_as_root(self, clean_routes):
        # An empty "Disallow:" value is a rule entry rendered as "/", not an empty rule list.
        clean_routes["/robots.txt"] = plain("User-agent: *\nDisallow:\n")
        report = run(clean_routes)
        assert report.verdict == "partial"
        assert "   - /" in report.report
        assert any("Disallowed paths" in r for r in report.social_risk)

    def test_idempotent(self, clean_routes):
        first = run(clean_routes).model_dump_json()
        second = run(clean_routes).model_dump_json()
        assert first == second


class TestScoring:
    def test_js_challenge_forces_blocked(self, clean_routes):
        clean_routes["/"] = html("<html><body>Checking your browser...</body></html>")
        report = run(clean_routes)
        assert report.verdict == "blocked"
        assert K.JS_CHALLENGE in finding_kinds(report)
        assert report.technical_risk and report.social_risk

    def test_abnormal_status_is_partial(self, clean_routes):
        clean_routes["/"] = html(CLEAN_HTML, status=503)
        report = run(clean_routes)
        assert report.verdict == "partial"
        assert report.report[:2] == ["📶 Status Code: 503", "⚠️ Abnormal status code"]

    def test_redirect_is_partial(self, clean_routes):
        clean_routes["/"] = httpx.Response(301, headers={"location": "https://example.com/home"})
        clean_routes["/home"] = html(CLEAN_HTML)
        report = run(clean_routes)
        assert report.verdict == "partial"
        assert K.REDIRECT in finding_kinds(report)
        assert any("Redirects" in r for r in report.technical_risk)

    def test_cloudflare_server_header_is_partial(self, clean_routes):
        clean_routes["/"] = html(CLEAN_HTML, server="cloudflare")
        report = run(clean_routes)
        assert report.verdict == "partial"
        assert "⚠️ Cloudflare protection detected" in report.report
        assert report.social_risk and report.technical_risk

    def test_anti_bot_header_then_challenge_reaches_ceiling(self, clean_routes):
        clean_routes["/"] = html("<script>setTimeout(function(){location.href='/'},1)</script>", server="cloudflare")
        assert run(clean_routes).verdict == "blocked"

    def test_robots_disallow_is_partial(self, clean_routes):
        clean_routes["/robots.txt"] = plain("User-agent: *\nDisallow: /admin\nAllow: /public\n")
        report = run(clean_routes)
        assert report.verdict == "partial"
        assert "   - /admin" in report.report
        assert any("Disallowed paths" in r for r in report.social_risk)

    def test_robots_missing_is_partial(self, clean_routes):
        del clean_routes["/robots.txt"]
        report = run(clean_routes)
        assert report.verdict == "partial"
        assert K.ROBOTS_UNREACHABLE in finding_kinds(report)
        assert any("Unable to verify crawling rules" in r for r in report.technical_risk)

    def test_robots_without_matching_agent_stays_allowed(self, clean_routes):
        clean_routes["/robots.txt"] = plain("User-agent: SomeBot\nDisallow: /\n")
        report = run(clean_routes)
        assert report.verdict == "allowed"
        assert K.ROBOTS_NO_RULES in finding_kinds(report)

    def test_robots_user_agent_override(self, clean_routes):
        clean_routes["/robots.txt"] = plain("User-agent: *\nAllow: /\nUser-agent: StrictBot\nDisallow: /\n")
        assert run(clean_routes).verdict == "allowed"
        assert run(clean_routes, robots_user_agent="StrictBot").verdict == "partial"

    def test_api_endpoints_partial_in_fixed_order(self, clean_routes):
        clean_routes["/feed/"] = html("<rss/>")
        clean_routes["/api/"] = httpx.Response(401)
        clean_routes["/rest/"] = httpx.Response(500)
        clean_routes["/v1/"] = httpx.ConnectError
        report = run(clean_routes)
        assert report.verdict == "partial"
        api = [f for f in report.findings if f.kind == K.API_ENDPOINT]
        assert [f.detail["url"] for f in api] == ["https://example.com/api/", "https://example.com/feed/"]
        assert [f.detail["status"] for f in api] == [401, 200]
        assert K.NO_API_ENDPOINTS not in finding_kinds(report)


class TestContentSignals:
    def test_email_flags_risk_without_raising_verdict(self, clean_routes):
        clean_routes["/"] = html("<p>Write to hello@example.org</p>")
        report = run(clean_routes)
        assert report.verdict == "allowed"
        assert any("personal data" in r for r in report.legal_risk)
        assert any("privacy" in r for r in report.social_risk)
        assert "Consult legal counsel" in report.suggestions[0]

    def test_meta_copyright_and_x_robots(self, clean_routes):
        body = '<meta name="robots" content="noindex"><footer>Terms of Service · © 2024</footer>'
        clean_routes["/"] = html(body, **{"x-robots-tag": "noarchive"})
        report = run(clean_routes)
        assert finding_kinds(report)[2:6] == [K.META_ROBOTS, K.TERMS_OF_SERVICE, K.COPYRIGHT, K.X_ROBOTS_TAG]
        assert len(report.legal_risk) == 2
        assert report.verdict == "allowed"

    def test_json_body_yields_no_content_findings(self, clean_routes):
        clean_routes["/"] = httpx.Response(200, json={"contact": "a@b.com", "note": "checking your browser"})
        report = run(clean_routes)
        assert report.verdict == "allowed"
        assert K.EMAIL_ADDRESS not in finding_kinds(report)
        assert K.JS_CHALLENGE not in finding_kinds(report)

    def test_findings_follow_pipeline_order(self, clean_routes):
        clean_routes["/"] = html("<p>Checking your browser</p><p>a@b.com</p>", server="cloudflare")
        clean_routes["/api/"] = httpx.Response(403)
        kinds = finding_kinds(run(clean_routes))
        order = [K.STATUS_CODE, K.ANTI_BOT_HEADER, K.JS_CHALLENGE, K.EMAIL_ADDRESS, K.ROBOTS_PARSED, K.API_ENDPOINT]
        assert [k for k in kinds if k in order] == order
