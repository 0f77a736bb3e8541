"""
Ambient particle effect.

ParticleField is a plain simulation that yields draw commands per frame;
ParticleLoop drives it on an asyncio task and hands each frame to a
callback. The loop only depends on the effect kind and color, and is
torn down whenever either changes.
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Callable, List, Optional

from .models import ParticleType

MAX_PARTICLES = 100
AREA_PER_PARTICLE = 15000


@dataclass
class Sprite:
    shape: str  # glyph | streak | dot
    x: float
    y: float
    size: float
    opacity: float
    color: str
    text: str = ""


class Particle:
    def __init__(self, kind: ParticleType, width: int, height: int, rng: random.Random):
        self.kind = kind
        self.width = width
        self.height = height
        self.rng = rng
        self.reset()

    def reset(self):
        r = self.rng
        falling = self.kind in (ParticleType.RAIN, ParticleType.SNOW)
        self.x = r.random() * self.width
        self.y = -10.0 if falling else r.random() * self.height
        self.size = r.random() * 3 + 1
        self.speed_x = r.random() * 2 - 1
        if self.kind == ParticleType.RAIN:
            self.speed_y = r.random() * 5 + 5
        elif self.kind == ParticleType.SNOW:
            self.speed_y = r.random() + 0.5
        else:
            self.speed_y = r.random() - 0.5
        self.life = r.random() * 100 + 100
        self.opacity = r.random() * 0.5 + 0.1

    def update(self):
        self.x += self.speed_x
        self.y += self.speed_y
        if self.y > self.height or self.x > self.width or self.x < 0:
            self.reset()

    def sprite(self, color: str) -> Sprite:
        if self.kind == ParticleType.DIGITAL:
            digit = str(self.rng.randint(0, 1))
            return Sprite("glyph", self.x, self.y, 10, self.opacity, color, digit)
        if self.kind == ParticleType.RAIN:
            return Sprite("streak", self.x, self.y, 15, self.opacity, color)
        return Sprite("dot", self.x, self.y, self.size, self.opacity, color)


def particle_count(width: int, height: int) -> int:
    return min((width * height) // AREA_PER_PARTICLE, MAX_PARTICLES)


class ParticleField:
    def __init__(
        self,
        kind: ParticleType,
        color: str,
        width: int = 1280,
        height: int = 720,
        rng: Optional[random.Random] = None,
    ):
        self.kind = ParticleType(kind)
        self.color = color
        self.width = width
        self.height = height
        self.rng = rng or random.Random()
        self.particles: List[Particle] = []
        if self.kind != ParticleType.NONE:
            self.particles = [
                Particle(self.kind, width, height, self.rng)
                for _ in range(particle_count(width, height))
            ]

    def resize(self, width: int, height: int):
        self.width, self.height = width, height
        for p in self.particles:
            p.width, p.height = width, height

    def step(self) -> List[Sprite]:
        frame = []
        for p in self.particles:
            p.update()
            frame.append(p.sprite(self.color))
        return frame


FrameCallback = Callable[[List[Sprite]], None]


class ParticleLoop:
    """Cooperative per-frame loop with deterministic teardown."""

    def __init__(
        self,
        on_frame: FrameCallback,
        fps: float = 60.0,
        max_frames: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self.on_frame = on_frame
        self.interval = 1.0 / fps
        self.max_frames = max_frames
        self.rng = rng
        self.field: Optional[ParticleField] = None
        self.frames = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, kind: ParticleType, color: str, width: int = 1280, height: int = 720):
        """Must be called from a running event loop."""
        if ParticleType(kind) == ParticleType.NONE:
            return
        self.field = ParticleField(kind, color, width, height, rng=self.rng)
        self.frames = 0
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self):
        while self.max_frames is None or self.frames < self.max_frames:
            self.on_frame(self.field.step())
            self.frames += 1
            await asyncio.sleep(self.interval)

    async def stop(self):
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def retarget(self, kind: ParticleType, color: str):
        field = self.field
        if field and self.running and field.kind == kind and field.color == color:
            return
        await self.stop()
        width, height = (field.width, field.height) if field else (1280, 720)
        self.start(kind, color, width, height)
