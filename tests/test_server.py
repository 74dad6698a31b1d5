from datetime import datetime, timezone
from unittest.mock import Mock, patch
from xmlrpc.client import Fault, loads

from django.test import TestCase

from pingkeeper.models import PingbackHistory
from pingkeeper.responses import PingbackResponse
from pingkeeper.server import process_payload, received

from .blog.models import Post
from .utils import FakeResponse, page, ping_payload, raw_call

SOURCE = 'https://www.source.example/2021/06/a-reply'
TARGET = 'https://blog.example/post/2021/06/15/hello-world'
IP = '192.0.2.10'


class ProcessPayloadTests(TestCase):
    def setUp(self):
        self.post = Post.objects.create(
            title='Hello World',
            slug='hello-world',
            pub_date=datetime(2021, 6, 15, 8, 0, tzinfo=timezone.utc),
        )
        patcher = patch('pingkeeper.examiner.open_url')
        self.open_url = patcher.start()
        self.addCleanup(patcher.stop)
        self.serve(page('A reply', '<a href="%s">Hello</a>' % TARGET))

    def serve(self, html):
        self.open_url.side_effect = lambda *args, **kwargs: FakeResponse(html)

    def test_accepted(self):
        on_accepted = Mock()
        response = process_payload(ping_payload(SOURCE, TARGET), IP, on_accepted)
        self.assertEqual(response, PingbackResponse.SUCCESS)
        history = PingbackHistory.objects.get()
        self.assertEqual(history.domain, 'source.example')
        self.assertEqual(history.source_url, SOURCE)
        self.assertEqual(history.source_title, 'A reply')
        self.assertEqual(history.target_post_id, str(self.post.pk))
        self.assertEqual(history.target_post_title, 'Hello World')
        self.assertEqual(history.source_ip, IP)
        on_accepted.assert_called_once_with(history)

    def test_sends_received_signal(self):
        handler = Mock()
        received.connect(handler)
        self.addCleanup(received.disconnect, handler)
        process_payload(ping_payload(SOURCE, TARGET), IP)
        handler.assert_called_once()
        self.assertEqual(handler.call_args[1]['history'], PingbackHistory.objects.get())

    def test_duplicate(self):
        body = ping_payload(SOURCE, TARGET)
        self.assertEqual(process_payload(body, IP), PingbackResponse.SUCCESS)
        self.assertEqual(process_payload(body, IP), PingbackResponse.PINGBACK_ALREADY_REGISTERED)
        self.assertEqual(PingbackHistory.objects.count(), 1)

    def test_duplicate_check_lost_race(self):
        process_payload(ping_payload(SOURCE, TARGET), IP)
        with patch.object(PingbackHistory.objects, 'already_pinged', return_value=False):
            response = process_payload(ping_payload(SOURCE, TARGET), IP)
        self.assertEqual(response, PingbackResponse.PINGBACK_ALREADY_REGISTERED)
        self.assertEqual(PingbackHistory.objects.count(), 1)

    def test_source_without_link(self):
        self.serve(page('A reply', 'No links here'))
        response = process_payload(ping_payload(SOURCE, TARGET), IP)
        self.assertEqual(response, PingbackResponse.SOURCE_NOT_CONTAIN_TARGET_URI)
        self.assertFalse(PingbackHistory.objects.exists())

    def test_unreachable_source(self):
        self.open_url.side_effect = OSError('Connection refused')
        response = process_payload(ping_payload(SOURCE, TARGET), IP)
        self.assertEqual(response, PingbackResponse.SOURCE_NOT_CONTAIN_TARGET_URI)

    def test_spam_title(self):
        self.serve(page('<i>Hello</i>', TARGET))
        response = process_payload(ping_payload(SOURCE, TARGET), IP)
        self.assertEqual(response, PingbackResponse.SPAM_DETECTED_FAKE_NOT_FOUND)
        self.assertFalse(PingbackHistory.objects.exists())

    def test_target_does_not_exist(self):
        target = 'https://blog.example/post/2021/06/15/does-not-exist'
        self.serve(page('A reply', target))
        response = process_payload(ping_payload(SOURCE, target), IP)
        self.assertEqual(response, PingbackResponse.TARGET_URI_NOT_EXIST)

    def test_target_is_not_a_post_url(self):
        for target in ['https://blog.example/about/', 'https://blog.example/post/2021/13/15/hello-world']:
            self.serve(page('A reply', target))
            response = process_payload(ping_payload(SOURCE, target), IP)
            self.assertEqual(response, PingbackResponse.TARGET_URI_NOT_EXIST)

    def test_unpublished_target(self):
        Post.objects.update(is_published=False)
        response = process_payload(ping_payload(SOURCE, TARGET), IP)
        self.assertEqual(response, PingbackResponse.TARGET_URI_NOT_EXIST)

    def test_invalid_payload(self):
        for body in [
            '',
            '   ',
            ping_payload(SOURCE, TARGET).replace('pingback.ping', 'pingback.pong'),
            raw_call('<boolean>2</boolean>', '<string>%s</string>' % TARGET),
            raw_call('<struct><value><string>a</string></value></struct>', '<string>%s</string>' % TARGET),
            ping_payload('http://source.example/' + 'a' * 2048, TARGET),
        ]:
            self.assertEqual(process_payload(body, IP), PingbackResponse.INVALID_PING_REQUEST)
        self.open_url.assert_not_called()

    def test_unexpected_error(self):
        with patch.object(PingbackHistory.objects, 'already_pinged', side_effect=RuntimeError('db is gone')):
            response = process_payload(ping_payload(SOURCE, TARGET), IP)
        self.assertEqual(response, PingbackResponse.GENERIC_ERROR)

    def test_response_values(self):
        self.assertEqual(
            sorted(str(r) for r in PingbackResponse),
            sorted([
                'Success', 'InvalidPingRequest', 'Error17SourceNotContainTargetUri',
                'Error32TargetUriNotExist', 'Error48PingbackAlreadyRegistered',
                'SpamDetectedFakeNotFound', 'GenericError',
            ]),
        )


class ServerViewTests(TestCase):
    def setUp(self):
        Post.objects.create(
            title='Hello World',
            slug='hello-world',
            pub_date=datetime(2021, 6, 15, 8, 0, tzinfo=timezone.utc),
        )
        patcher = patch('pingkeeper.examiner.open_url')
        self.open_url = patcher.start()
        self.addCleanup(patcher.stop)

    def post(self, body):
        return self.client.post('/pingback/', data=body, content_type='text/xml', REMOTE_ADDR=IP)

    def test_success(self):
        self.open_url.return_value = FakeResponse(page('A reply', TARGET))
        response = self.post(ping_payload(SOURCE, TARGET))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(loads(response.content)[0], ('OK',))
        self.assertEqual(PingbackHistory.objects.get().source_ip, IP)

    def test_fault(self):
        self.open_url.return_value = FakeResponse(page('A reply', 'nothing'))
        response = self.post(ping_payload(SOURCE, TARGET))
        self.assertEqual(response.status_code, 200)
        with self.assertRaises(Fault) as cm:
            loads(response.content)
        self.assertEqual(cm.exception.faultCode, 17)

    def test_invalid_request_fault(self):
        with self.assertRaises(Fault) as cm:
            loads(self.post('').content)
        self.assertEqual(cm.exception.faultCode, -32600)

    def test_spam_is_not_found(self):
        self.open_url.return_value = FakeResponse(page('<b>Breaking</b> News', TARGET))
        response = self.post(ping_payload(SOURCE, TARGET))
        self.assertEqual(response.status_code, 404)

    def test_get_not_allowed(self):
        self.assertEqual(self.client.get('/pingback/').status_code, 405)
