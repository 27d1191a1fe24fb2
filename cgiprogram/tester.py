#!/usr/bin/env python3
"""
Remote tester for a deployed cgiProgram.

Drives the program through HTTP_SWITCHES query variables and checks what the
web server in front of it does with the output.

    python -m cgiprogram.tester --url http://localhost:8081/cgiProgram.cgi.py
"""

import argparse
import sys
from datetime import datetime

import requests

from .log import log_error, log_info, log_success
from .render import synthetic_body


class CgiProgramTester:
    def __init__(self, url, timeout=10):
        self.url = url
        self.timeout = timeout
        self.session = requests.Session()
        self.results = {
            'total_tests': 0,
            'passed': 0,
            'failed': 0,
            'tests': []
        }

    def add_test_result(self, test_name, passed, details=""):
        self.results['total_tests'] += 1
        if passed:
            self.results['passed'] += 1
            log_success(f"{test_name}: PASSED")
        else:
            self.results['failed'] += 1
            log_error(f"{test_name}: FAILED - {details}")

        self.results['tests'].append({
            'name': test_name,
            'passed': passed,
            'details': details,
            'timestamp': datetime.now().isoformat()
        })

    def get(self, switches, params=None, **kwargs):
        query = {"HTTP_SWITCHES": switches}
        query.update(params or {})
        return self.session.get(self.url, params=query, timeout=self.timeout, **kwargs)

    def post(self, switches, data, headers=None):
        return self.session.post(self.url, params={"HTTP_SWITCHES": switches},
                                 data=data, headers=headers, timeout=self.timeout)

    def test_default_output(self):
        response = self.session.get(self.url, timeout=self.timeout)
        sections = ["<H2>Args</H2>", "<H2>Environment Variables</H2>",
                    "<H2>No Query String Found</H2>", "<H2>No Post Data Found</H2>"]
        missing = [s for s in sections if s not in response.text]
        self.add_test_result("Default output", response.status_code == 200 and not missing,
                             f"Status: {response.status_code}, missing: {missing}")

    def test_query_decoding(self):
        response = self.get("-q", {"name": "a b", "path": "/x&y"})
        expected = ["<p>QVAR name=a b</p>", "<p>QVAR path=/x&y</p>"]
        missing = [e for e in expected if e not in response.text]
        self.add_test_result("Query decoding", response.status_code == 200 and not missing,
                             f"missing: {missing}")

    def test_post_decoding(self):
        response = self.post("-p", data={"hello": "world", "sp": "a b"})
        expected = ["<H2>Decoded Post Variables</H2>", "<p>PVAR hello=world</p>",
                    "<p>PVAR sp=a b</p>"]
        missing = [e for e in expected if e not in response.text]
        self.add_test_result("POST decoding", response.status_code == 200 and not missing,
                             f"missing: {missing}")

    def test_raw_post(self):
        body = "raw body, not a form"
        response = self.post("-p", data=body, headers={"Content-Type": "text/plain"})
        self.add_test_result("Raw POST echo", body in response.text,
                             f"Status: {response.status_code}")

    def test_status(self):
        response = self.get("-s 404")
        self.add_test_result("Custom status", response.status_code == 404,
                             f"Status: {response.status_code}")

    def test_location(self):
        response = self.get("-l /elsewhere.html", allow_redirects=False)
        location = response.headers.get("Location", "")
        self.add_test_result("Location redirect",
                             response.status_code == 302 and location.endswith("/elsewhere.html"),
                             f"Status: {response.status_code}, Location: {location!r}")

    def test_header_lines(self, lines=5):
        response = self.get(f"-h {lines}")
        missing = [i for i in range(lines) if f"X-CGI-{i}" not in response.headers]
        self.add_test_result("Extra header lines", response.status_code == 200 and not missing,
                             f"missing: {missing}")

    def test_body_size(self, size=1000):
        response = self.get(f"-b {size}")
        expected = synthetic_body(size)
        self.add_test_result("Synthetic body", response.text.startswith(expected),
                             f"got {len(response.text)} chars, expected a {len(expected)} char prefix")

    def run_all_tests(self):
        log_info(f"Testing cgiProgram at {self.url}")
        tests = [
            self.test_default_output,
            self.test_query_decoding,
            self.test_post_decoding,
            self.test_raw_post,
            self.test_status,
            self.test_location,
            self.test_header_lines,
            self.test_body_size,
        ]
        for test in tests:
            try:
                test()
            except requests.exceptions.RequestException as e:
                self.add_test_result(test.__name__, False, f"ERROR: {e}")
        self.print_summary()
        return self.results['failed'] == 0

    def print_summary(self):
        print("=" * 50)
        print("📊 TEST SUMMARY")
        print("=" * 50)
        print(f"✅ Passed: {self.results['passed']}")
        print(f"❌ Failed: {self.results['failed']}")
        total = self.results['total_tests']
        if total > 0:
            success_rate = (self.results['passed'] / total) * 100
            print(f"📈 Success Rate: {success_rate:.1f}%")
        for test in self.results['tests']:
            if not test['passed']:
                print(f"   • {test['name']}: {test['details']}")


def main():
    parser = argparse.ArgumentParser(description='Check a web server running cgiProgram')
    parser.add_argument('--url', type=str, default='http://localhost:8081/cgiProgram.cgi.py',
                        help='URL of the deployed program (default: http://localhost:8081/cgiProgram.cgi.py)')
    parser.add_argument('--timeout', type=int, default=10,
                        help='Request timeout in seconds (default: 10)')
    args = parser.parse_args()

    tester = CgiProgramTester(args.url, args.timeout)
    sys.exit(0 if tester.run_all_tests() else 1)


if __name__ == "__main__":
    main()
