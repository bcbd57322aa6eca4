# python
"""
Dispatch runner tests (async).

Scope
- Validate handler execution order, awaiting of coroutine handlers, and dispatch
  into subcommands by name or alias.
- Validate the shared accumulator: children see everything their ancestors parsed,
  while separate runs never share state.
- Validate help/version short-circuits, stray tails, and fault annotation.

Conventions
- Test method names follow CamelCase per project convention.
- Runs go through Command.run; output is captured with contextlib redirection.
"""

from __future__ import annotations

import asyncio
import contextlib
import io
import unittest
from unittest import IsolatedAsyncioTestCase

from corsair import Command, CommandError


class TestDispatch(IsolatedAsyncioTestCase):
    """Handlers and subcommands."""

    def setUp(self):
        self.calls = []
        self.git = Command("git", version="2.45.0")
        self.git.option("--verbose", "flag", short_flag="-V")
        self.commit = self.git.command("commit", aliases=("c",))
        self.commit.option("--message", short_flag="-m")

        @self.commit.handler
        def onCommit(result, command):
            self.calls.append(("commit", dict(result.options), command))

    async def testDispatchThroughAlias(self):
        await self.git.run(["c", "-m", "msg"])
        self.assertEqual(self.calls, [("commit", {"message": "msg"}, self.commit)])

    async def testDispatchThroughName(self):
        result = await self.git.run(["commit", "--message", "msg"])
        self.assertEqual(result.options, {"message": "msg"})

    async def testChildSeesAncestorOptions(self):
        await self.git.run(["-V", "c", "-m", "msg"])
        self.assertEqual(self.calls[-1][1], {"verbose": True, "message": "msg"})

    async def testParentHandlersRunFirst(self):
        self.git.handler(lambda result, command: self.calls.append(("git", dict(result.options), command)))
        await self.git.run(["c", "-m", "msg"])
        self.assertEqual([call[0] for call in self.calls], ["git", "commit"])

    async def testHandlersRunInDeclarationOrder(self):
        order = []
        self.commit.handler(lambda result, command: order.append(1))
        self.commit.handler(lambda result, command: order.append(2))
        await self.git.run(["c", "-m", "msg"])
        self.assertEqual(order, [1, 2])

    async def testCoroutineHandlersAreAwaitedInTurn(self):
        order = []

        @self.git.handler
        async def slow(result, command):
            await asyncio.sleep(0.01)
            order.append("slow")

        @self.git.handler
        def fast(result, command):
            order.append("fast")

        await self.git.run([])
        self.assertEqual(order, ["slow", "fast"])

    async def testRunsDoNotShareState(self):
        first = await self.git.run(["-V"])
        second = await self.git.run([])
        self.assertEqual(first.options, {"verbose": True})
        self.assertEqual(second.options, {})

    async def testStrayTailIsIgnored(self):
        result = await self.git.run(["--", "extra", "tokens"])
        self.assertEqual(result.unparsed, ["extra", "tokens"])
        self.assertEqual(self.calls, [])

    async def testHandlerExceptionsPropagate(self):
        def broken(result, command):
            raise RuntimeError("boom")

        self.commit.handler(broken)
        with self.assertRaises(RuntimeError):
            await self.git.run(["c", "-m", "msg"])


class TestFaults(IsolatedAsyncioTestCase):
    """Fault positions and annotation."""

    def setUp(self):
        self.git = Command("git")
        self.commit = self.git.command("commit")
        self.commit.option("--message", short_flag="-m")

    async def testChildErrorsCountFromTheWholeInvocation(self):
        with self.assertRaises(CommandError) as context:
            await self.git.run(["commit", "-m", "msg", "--nope"])
        self.assertEqual(str(context.exception), "unknown option '--nope' at fourth position")

    async def testFaultCarriesFailingLevel(self):
        with self.assertRaises(CommandError) as context:
            await self.git.run(["commit"])
        self.assertIs(context.exception.options["tool"], self.commit)
        self.assertEqual(str(context.exception), "required option '--message' is missing")

    async def testRootFaultCarriesRoot(self):
        with self.assertRaises(CommandError) as context:
            await self.git.run(["--nope"])
        self.assertIs(context.exception.options["tool"], self.git)

    async def testHandlersOfFailingLevelDoNotRun(self):
        calls = []
        self.commit.handler(lambda result, command: calls.append(command))
        with self.assertRaises(CommandError):
            await self.git.run(["commit"])
        self.assertEqual(calls, [])


class TestHelpers(IsolatedAsyncioTestCase):
    """Built-in help/version during a run."""

    def setUp(self):
        self.calls = []
        self.git = Command("git", version="2.45.0")
        self.git.argument("repo")
        self.git.handler(lambda result, command: self.calls.append(command))

    async def testHelpSkipsHandlers(self):
        with contextlib.redirect_stdout(io.StringIO()) as output:
            result = await self.git.run(["--help"])
        self.assertEqual(self.calls, [])
        self.assertEqual(result.helper, "help")
        self.assertIn("usage: git", output.getvalue())

    async def testVersionSkipsHandlers(self):
        with contextlib.redirect_stdout(io.StringIO()) as output:
            await self.git.run(["-v"])
        self.assertEqual(self.calls, [])
        self.assertIn("git — 2.45.0", output.getvalue())

    async def testChildHelpRendersChild(self):
        self.git.command("clone")
        with contextlib.redirect_stdout(io.StringIO()) as output:
            await self.git.run(["repo", "clone", "-h"])
        self.assertIn("usage: git clone", output.getvalue())
        self.assertEqual(self.calls, [self.git])


if __name__ == "__main__":
    unittest.main()
