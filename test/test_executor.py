"""
Executor behavioral tests (resolution, validation hooks, lifecycle).

Scope
- Validate tree resolution by name/alias and the fallback to the last match.
- Validate hook dispatch: received names, default messages, halting, recovery.
- Validate pre_run/run/post_run ordering, early exit, and on_error routing.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from cling import (
    Command,
    Executor,
    State,
    resolve,
    MissingArgumentsError,
    MissingNameError,
    MissingOptionsError,
    MissingValuesError,
    UnknownArgumentsError,
    UnknownOptionsError,
)


class Recorder(Command):
    """Records every lifecycle call; failures can be injected per stage."""

    def __init__(self, name="greet", *, fail=None, stop=False, **kwargs):
        self._recorded = name
        self.fail = fail
        self.stop = stop
        self.trace = []
        super().__init__(**kwargs)

    def setup(self):
        self.name = self._recorded
        self.add_argument("name", required=True)
        self.add_option("caps", short="c")
        self.add_option("greeting", short="g", has_value=True)

    def _record(self, stage, arguments, options):
        self.trace.append((stage, dict(arguments), dict(options)))
        if self.fail == stage:
            raise RuntimeError(stage)

    def pre_run(self, arguments, options):
        self._record("pre_run", arguments, options)
        if self.stop:
            return False

    def run(self, arguments, options):
        self._record("run", arguments, options)

    def post_run(self, arguments, options):
        self._record("post_run", arguments, options)


class Bare(Command):
    def setup(self):
        self.name = "bare"

    def run(self, arguments, options):
        self.ran = (dict(arguments), dict(options))


class Unnamed(Command):
    def setup(self):
        pass

    def run(self, arguments, options):
        pass


def _stages(command):
    return [stage for stage, *_ in command.trace]


class TestResolution(TestCase):

    def setUp(self):
        self.root = Bare()
        self.sub = self.root.add_command(Recorder("sub", aliases=["s"]))
        self.leaf = self.sub.add_command(Recorder("leaf"))

    def testDescend(self):
        self.assertEqual(resolve(self.root, ["sub", "leaf", "x"]), (self.leaf, ["x"]))

    def testAlias(self):
        self.assertEqual(resolve(self.root, ["s", "leaf"]), (self.leaf, []))

    def testNoMatchStaysAtRoot(self):
        self.assertEqual(resolve(self.root, ["x", "sub"]), (self.root, ["x", "sub"]))

    def testCaseSensitive(self):
        self.assertEqual(resolve(self.root, ["Sub"]), (self.root, ["Sub"]))

    def testLeafArgumentLookingLikeCommand(self):
        self.assertEqual(resolve(self.root, ["sub", "leaf", "sub"]), (self.leaf, ["sub"]))

    def testEmptyTokens(self):
        self.assertEqual(resolve(self.root, []), (self.root, []))

    def testResolutionIsRepeatable(self):
        self.assertEqual(resolve(self.root, ["s", "leaf", "Dev"]), resolve(self.root, ["s", "leaf", "Dev"]))

    def testSubcommandRuns(self):
        self.root.execute(["sub", "leaf", "Dev", "-c"])
        self.assertEqual(_stages(self.leaf), ["pre_run", "run", "post_run"])
        self.assertEqual(self.leaf.trace[1][1], {"name": "Dev"})
        self.assertIs(self.leaf.trace[1][2]["caps"], True)
        self.assertEqual(self.sub.trace, [])
        self.assertFalse(hasattr(self.root, "ran"))


class TestLifecycle(TestCase):

    def testStageOrder(self):
        command = Recorder()
        executor = Executor(command)
        executor.execute(["Dev"])
        self.assertEqual(_stages(command), ["pre_run", "run", "post_run"])
        self.assertIs(executor.state, State.DONE)
        self.assertIs(executor.target, command)

    def testStagesShareValues(self):
        command = Recorder()
        command.execute(["-g", "hi", "Dev"])
        expected = ({"name": "Dev"}, {"caps": False, "greeting": "hi"})
        self.assertEqual([tuple(entry[1:]) for entry in command.trace], [expected] * 3)

    def testPreRunStops(self):
        command = Recorder(stop=True)
        executor = Executor(command)
        executor.execute(["Dev"])
        self.assertEqual(_stages(command), ["pre_run"])
        self.assertIs(executor.state, State.DONE)

    def testDefaultErrorHookReraises(self):
        command = Recorder(fail="run")
        with self.assertRaises(RuntimeError) as context:
            command.execute(["Dev"])
        self.assertEqual(str(context.exception), "run")
        self.assertEqual(_stages(command), ["pre_run", "run"])

    def testErrorHookReceivesException(self):
        command = Recorder(fail="pre_run")
        received = []
        command.on_error(received.append)
        executor = Executor(command)
        executor.execute(["Dev"])
        self.assertEqual(len(received), 1)
        self.assertIsInstance(received[0], RuntimeError)
        self.assertEqual(_stages(command), ["pre_run"])
        self.assertIs(executor.state, State.FAILED)

    def testErrorHookCanTransform(self):
        command = Recorder(fail="post_run")

        @command.on_error
        def handler(exception):
            raise KeyError("wrapped") from exception

        with self.assertRaises(KeyError):
            command.execute(["Dev"])

    def testExecuteTwiceIsIdempotent(self):
        command = Recorder()
        command.execute(["Dev", "-c"])
        command.execute(["Dev", "-c"])
        self.assertEqual(command.trace[:3], command.trace[3:])

    def testMissingName(self):
        with self.assertRaises(MissingNameError):
            Unnamed().execute([])

    def testBareCommandGetsEmptyInputs(self):
        command = Bare()
        command.execute([])
        self.assertEqual(command.ran, ({}, {}))


class TestValidationHooks(TestCase):

    def testDefaultMissingArguments(self):
        command = Recorder()
        executor = Executor(command)
        with self.assertRaises(MissingArgumentsError) as context:
            executor.execute([])
        self.assertEqual(str(context.exception), "Missing required argument: name")
        self.assertEqual(context.exception.names, ("name",))
        self.assertEqual(command.trace, [])
        self.assertIs(executor.state, State.FAILED)

    def testDefaultMissingArgumentsPlural(self):
        class Copy(Bare):
            def setup(self):
                self.name = "copy"
                self.add_argument("src", required=True)
                self.add_argument("dst", required=True)

        with self.assertRaises(MissingArgumentsError) as context:
            Copy().execute([])
        self.assertEqual(str(context.exception), "Missing required arguments: src, dst")

    def testDefaultUnknownArguments(self):
        with self.assertRaises(UnknownArgumentsError) as context:
            Recorder().execute(["Dev", "extra"])
        self.assertEqual(str(context.exception), "Unknown argument: extra")

    def testDefaultUnknownOptions(self):
        with self.assertRaises(UnknownOptionsError) as context:
            Bare().execute(["--a", "-b"])
        self.assertEqual(str(context.exception), "Unknown options: a, b")

    def testDefaultMissingValues(self):
        with self.assertRaises(MissingValuesError) as context:
            Recorder().execute(["Dev", "--greeting"])
        self.assertEqual(str(context.exception), "Missing value for option: greeting")

    def testDefaultMissingOptions(self):
        class Login(Bare):
            def setup(self):
                self.name = "login"
                self.add_option("user", has_value=True, required=True)
                self.add_option("token", has_value=True, required=True)

        with self.assertRaises(MissingOptionsError) as context:
            Login().execute([])
        self.assertEqual(str(context.exception), "Missing required options: user, token")

    def testMissingArgumentsHookReceivesNames(self):
        command = Recorder()
        received = []
        command.on_missing_arguments(received.append)
        command.execute([])
        self.assertEqual(received, [["name"]])
        self.assertEqual(_stages(command), ["pre_run", "run", "post_run"])
        self.assertEqual(command.trace[1][1], {})

    def testUnknownArgumentsHookReceivesNames(self):
        command = Recorder()
        received = []
        command.on_unknown_arguments(received.append)
        command.execute(["Dev", "extra"])
        self.assertEqual(received, [["extra"]])

    def testUnknownOptionsHookReceivesNames(self):
        command = Bare()
        received = []
        command.on_unknown_options(received.append)
        command.execute(["--nope"])
        self.assertEqual(received, [["nope"]])

    def testMissingValuesHookReceivesNames(self):
        command = Recorder()
        received = []
        command.on_missing_values(received.append)
        command.execute(["Dev", "-g"])
        self.assertEqual(received, [["greeting"]])

    def testHookReturningFalseHalts(self):
        command = Recorder()
        command.on_missing_arguments(lambda names: False)
        executor = Executor(command)
        executor.execute([])
        self.assertEqual(command.trace, [])
        self.assertIs(executor.state, State.FAILED)

    def testHooksRunInCategoryOrder(self):
        command = Recorder()
        order = []
        command.on_missing_arguments(lambda names: order.append("missing_arguments"))
        command.on_unknown_options(lambda names: order.append("unknown_options"))
        command.on_missing_values(lambda names: order.append("missing_values"))
        command.execute(["--nope", "-g"])
        self.assertEqual(order, ["missing_arguments", "unknown_options", "missing_values"])

    def testValidationFaultSkipsErrorHook(self):
        command = Recorder()
        received = []
        command.on_error(received.append)
        with self.assertRaises(MissingArgumentsError):
            command.execute([])
        self.assertEqual(received, [])

    def testHooksBelongToTarget(self):
        root = Bare()
        child = root.add_command(Recorder("child"))
        received = []
        child.on_missing_arguments(received.append)
        root.execute(["child"])
        self.assertEqual(received, [["name"]])


if __name__ == "__main__":
    unittest.main()
