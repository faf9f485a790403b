from scan_fixtures.basic import ITestService


class NamespaceBasedService(ITestService):
    pass
