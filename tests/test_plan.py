"""Tests for taskdock.plan - resolved per-step run plans."""

import pytest

from taskdock.errors import EnvResolutionError, FollowCycleError, TaskNotFoundError
from taskdock.plan import plan_task
from taskdock.schemas import Configs, MountDescriptor, Step, Task


def _configs(envs=(), **tasks):
    return Configs(envs=tuple(envs), tasks=tasks)


class TestPlanTask:
    """Tests for plan_task."""

    def test_resolves_step_fields(self, make_resolver):
        resolver = make_resolver(dotenv={"SRC": "/srv/code", "UID": "1000"})
        configs = _configs(build=Task(name="build", steps=(
            Step(
                name="compile",
                image="gcc",
                command=("make",),
                dir="`$SRC`/build",
                mounts=("`$SRC`:/code:w", "~/cache:/cache"),
                user="`$UID`",
            ),
        )))

        [plan] = plan_task(configs, "build", resolver, home="/home/dev")

        assert plan.task == "build"
        assert plan.name == "compile"
        assert plan.image == "gcc"
        assert plan.commands == (("make",),)
        assert plan.workdir == "/srv/code/build"
        assert plan.user == "1000"
        assert plan.mounts == (
            MountDescriptor(source="/srv/code", target="/code", read_only=False),
            MountDescriptor(source="/home/dev/cache", target="/cache", read_only=True),
        )

    def test_env_precedence(self, resolver):
        configs = _configs(
            envs=("A=global", "B=global", "C=global"),
            build=Task(name="build", envs=("B=task", "C=task"), steps=(
                Step(image="node", envs=("C=step",)),
            )),
        )

        [plan] = plan_task(configs, "build", resolver)

        assert plan.env == {"A": "global", "B": "task", "C": "step"}

    def test_default_step_name(self, resolver):
        configs = _configs(build=Task(name="build", steps=(Step(image="a"), Step(image="b"))))
        assert [p.name for p in plan_task(configs, "build", resolver)] == ["build[0]", "build[1]"]

    def test_follow_expands_in_place(self, resolver):
        configs = _configs(
            prepare=Task(name="prepare", steps=(Step(image="node", command=("npm", "ci")),)),
            build=Task(name="build", steps=(
                Step(follow=" prepare "),
                Step(image="node", command=("npm", "run", "build")),
            )),
        )

        plans = plan_task(configs, "build", resolver)

        assert [(p.task, p.commands) for p in plans] == [
            ("prepare", (("npm", "ci"),)),
            ("build", (("npm", "run", "build"),)),
        ]

    def test_follow_same_task_twice_is_not_a_cycle(self, resolver):
        configs = _configs(
            lint=Task(name="lint", steps=(Step(image="ruff"),)),
            ci=Task(name="ci", steps=(Step(follow="lint"), Step(follow="lint"))),
        )
        assert len(plan_task(configs, "ci", resolver)) == 2

    def test_follow_cycle(self, resolver):
        configs = _configs(
            a=Task(name="a", steps=(Step(follow="b"),)),
            b=Task(name="b", steps=(Step(follow="a"),)),
        )
        with pytest.raises(FollowCycleError, match="a -> b -> a"):
            plan_task(configs, "a", resolver)

    def test_unknown_task(self, resolver):
        with pytest.raises(TaskNotFoundError, match="'deploy'"):
            plan_task(_configs(), "deploy", resolver)

    def test_unresolved_directive(self, resolver):
        configs = _configs(build=Task(name="build", steps=(Step(image="node", user="`$NOBODY`"),)))
        with pytest.raises(EnvResolutionError, match="NOBODY"):
            plan_task(configs, "build", resolver)

    def test_to_dict(self, resolver):
        configs = _configs(build=Task(name="build", steps=(
            Step(image="node", command=("node",), mounts=("/data:/data",)),
        )))
        [plan] = plan_task(configs, "build", resolver)

        assert plan.to_dict() == {
            "task": "build",
            "name": "build[0]",
            "image": "node",
            "commands": [["node"]],
            "env": {},
            "workdir": None,
            "mounts": [{"type": "bind", "source": "/data", "target": "/data", "read_only": True}],
            "user": None,
        }
