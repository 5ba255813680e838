from .mocks import MockServer, MockClient, Recorder


def with_client(connected=True, **options):
    """ Run the test coroutine with a mock server, a mock client and a recording event handler. """
    def inner(f):
        async def run():
            server = MockServer()
            recorder = Recorder()
            client = MockClient('TestcaseRunner', mock_server=server, handlers=[recorder], **options)
            if connected:
                await client.connect('mock://local', 1337)
                recorder.clear()

            try:
                return await f(client=client, server=server, recorder=recorder)
            finally:
                await client.disconnect()

        run.__name__ = f.__name__
        return run
    return inner
