import numpy as np
import noise
import matplotlib.pyplot as plt
import logging
from typing import Optional, Tuple

from .curves import clamp
from .errors import InvalidParameter

logger = logging.getLogger(__name__)

# Seeds are 16-bit, with 65,536 possible values (from 0-65535)
MAX_SEED = 65535

# pnoise2 tiles every 1024 units by default; the seed offset stays well inside that.
_REPEAT = 1024
_OFFSET_RANGE = 256.0


class NoiseSource:
    """
    Seeded 2D coherent noise, constructed once per generation pass.

    Wraps the C-optimized Perlin implementation from the 'noise' library. The
    seed selects the permutation ('base') and a fixed domain offset, so every
    one of the 65,536 seeds yields a distinct field. No global random state
    is touched: the same (seed, octaves) pair always reproduces the same values.

    Attributes:
        seed (int): 0-65535.
        octaves (int): Layers of detail (default 5).
        persistence (float): Amplitude multiplier per octave.
        lacunarity (float): Frequency multiplier per octave.
    """

    def __init__(self, seed: int, octaves: int = 5, persistence: float = 0.5, lacunarity: float = 2.0):
        if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
            raise InvalidParameter(f"Seed must be an integer, got {seed!r}.")
        if not 0 <= seed <= MAX_SEED:
            raise InvalidParameter(f"Seed must be between 0 and {MAX_SEED}, got {seed}.")
        if int(octaves) < 1:
            raise InvalidParameter(f"Noise needs at least one octave, got {octaves}.")

        self.seed = int(seed)
        self.octaves = int(octaves)
        self.persistence = float(persistence)
        self.lacunarity = float(lacunarity)

        # pnoise2's 'base' only distinguishes 256 fields, so the rest of the
        # seed goes into a fixed shift of the sampling domain.
        self._base = self.seed % 256
        rng = np.random.default_rng(seed=self.seed)
        offset_x, offset_y = rng.uniform(0.0, _OFFSET_RANGE, size=2)
        self._offset = (float(offset_x), float(offset_y))

    def __repr__(self) -> str:
        return f"NoiseSource(seed={self.seed}, octaves={self.octaves})"

    def sample(self, x: float, y: float) -> float:
        """
        Layered Perlin noise at (x, y), clamped to [-1, 1].
        Continuous in both coordinates.
        """
        raw_val = noise.pnoise2(
            x + self._offset[0],
            y + self._offset[1],
            octaves=self.octaves,
            persistence=self.persistence,
            lacunarity=self.lacunarity,
            repeatx=_REPEAT,
            repeaty=_REPEAT,
            base=self._base,
        )
        return clamp(raw_val, -1.0, 1.0)

    def jitter(self, row_index: int, sample_index: int) -> float:
        """
        The 'spiky' random term for one grid position, in [-0.25, 0.25].

        Derived statelessly from (seed, row, sample) so that the coordinate
        function stays pure: recomputing a point gives the same jitter.
        """
        state = np.random.SeedSequence([self.seed, int(row_index), int(sample_index)]).generate_state(1)[0]
        uniform = float(state) / 2 ** 32
        return (uniform - 0.5) * 0.5

    def grid(self, width: int, height: int, scale: float = 100.0) -> np.ndarray:
        """
        Samples the field on a (height, width) pixel grid.

        Args:
            width: Number of columns.
            height: Number of rows.
            scale: Zoom level of noise. Lower = finer, Higher = broader.

        Returns:
            np.ndarray: Float32 array of noise values in [-1, 1].
        """
        if scale <= 0:
            raise InvalidParameter(f"Noise grid scale must be positive, got {scale}.")

        logger.info(f"Sampling noise grid (Seed: {self.seed}, Scale: {scale}, Octaves: {self.octaves})...")

        noise_array = np.zeros((height, width), dtype=np.float32)
        for y in range(height):
            for x in range(width):
                noise_array[y][x] = self.sample(x / scale, y / scale)

        logger.info(f"Noise sampled. Range: {np.min(noise_array):.4f} to {np.max(noise_array):.4f}")
        return noise_array


def preview_noise(
    noise_source: NoiseSource,
    width: int = 200,
    height: int = 150,
    scale: float = 50.0,
    output_path: Optional[str] = None,
) -> Tuple[np.ndarray, "plt.Figure"]:
    """
    Visual harness for tuning the noise field without running the generator.

    :param noise_source: The seeded source to inspect.
    :param width: Grid width in pixels.
    :param height: Grid height in pixels.
    :param scale: Passed to NoiseSource.grid.
    :param output_path: If given, the figure is saved there instead of being kept open.
    :return: Tuple (noise array, matplotlib Figure)
    """
    arr = noise_source.grid(width, height, scale=scale)

    logger.info(
        f"Noise stats - Shape: {arr.shape}, Min: {np.min(arr):.4f}, Max: {np.max(arr):.4f}, "
        f"Mean: {np.mean(arr):.4f}, Std: {np.std(arr):.4f}"
    )

    fig = plt.figure(figsize=(10, 8))
    plt.title(f"Noise Preview\nSeed: {noise_source.seed} | Scale: {scale} | Octaves: {noise_source.octaves}")

    img = plt.imshow(arr, cmap='gray', vmin=-1.0, vmax=1.0)
    plt.colorbar(img, label="Noise Value")
    plt.axis('off')  # Hide pixel coordinates

    if output_path is not None:
        fig.savefig(output_path)
        plt.close(fig)

    return arr, fig
