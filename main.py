from rich.pretty import pprint

from cling import *


class Greet(Command):
    def setup(self):
        self.name = "greet"
        self.summary = "say hello"
        self.add_argument("name", description="who to greet", required=True)
        self.add_option("caps", short="c", description="shout it")
        self.add_option("greeting", short="g", has_value=True, default="hello")

    def run(self, arguments, options):
        message = "%s, %s" % (options["greeting"], arguments["name"])
        print(message.upper() if options["caps"] else message, file=self.stdout)


class Tool(Command):
    def setup(self):
        self.name = "tool"
        self.header = "tool v0.0.0"
        self.add_option("verbose", short="v")

    def run(self, arguments, options):
        pprint(self)


tool = Tool(shell=True, fancy=True, colorful=True)
tool.add_command(Greet(aliases=["hi"]))


@tool.command
def version(arguments, options):
    """Print the version."""
    print(__version__)


if __name__ == '__main__':
    invoke(tool)
