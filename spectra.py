"""
Transfer Functions and Cross-Spectral Density Matrices
------------------------------------------------------
Frequency-domain synthesis from a set of images by superposition of
spherical waves, and the noiseless (clairvoyant) array CSDM built from it.
"""
from __future__ import annotations

from typing import Iterable, Union
import numpy as np

from images import ImageCollection

__all__ = [
    "transfer_function",
    "image_transfer_functions",
    "clairvoyant_csdm",
    "clairvoyant_csdm_with_decoherence",
]

IndexSpec = Union[int, Iterable[int], None]


def _freq_axis(freqs) -> np.ndarray:
    return np.atleast_1d(np.asarray(freqs, dtype=float))


def image_transfer_functions(images: ImageCollection, water_c: float, freqs,
                             image_indices: IndexSpec = None) -> np.ndarray:
    """Per-image contributions, N-by-F-by-R-by-S.

    Image n contributes ``(R/d) exp(-i 2 pi f d / c)`` at every receiver and
    source.
    """
    f = _freq_axis(freqs)
    idx = images.resolve_indices(image_indices)
    geo = images.geometry
    out = np.zeros((len(idx), f.size, geo.n_receivers, geo.n_sources), dtype=complex)

    minus_ik = (-2j * np.pi / water_c) * f[:, None, None]
    for k, n in enumerate(idx):
        img = images[n]
        amplitude = img.rcoeff / img.dist
        out[k] = amplitude[None, :, :] * np.exp(minus_ik * img.dist[None, :, :])
    return out


def transfer_function(images: ImageCollection, water_c: float, freqs,
                      image_indices: IndexSpec = None) -> np.ndarray:
    """Complex transfer function summed over the selected images.

    Args:
        images: output of generate_images()
        water_c: sound speed in water (m/s)
        freqs: frequencies (Hz)
        image_indices: images to include, default all

    Returns:
        F-by-R-by-S complex array (frequencies, receivers, sources). Zero when
        no images are selected.
    """
    return image_transfer_functions(images, water_c, freqs, image_indices).sum(axis=0)


def _outer(T: np.ndarray) -> np.ndarray:
    # F-by-R-by-S -> R-by-R-by-F-by-S, K[:, :, f, s] = t t^H
    return np.einsum("fis,fjs->ijfs", T, T.conj())


def clairvoyant_csdm(images: ImageCollection, water_c: float, freqs,
                     image_indices: IndexSpec = None) -> np.ndarray:
    """CSDM with no noise and full coherence between eigenrays.

    Returns:
        R-by-R-by-F-by-S complex array
    """
    return _outer(transfer_function(images, water_c, freqs, image_indices))


def clairvoyant_csdm_with_decoherence(images: ImageCollection, water_c: float, freqs,
                                      coherence_surface: float,
                                      coherence_seabed: float,
                                      image_indices: IndexSpec = None) -> np.ndarray:
    """Clairvoyant CSDM with ad hoc loss of coherence between eigenrays.

    The pair of images (n1, n2) contributes ``T1 T2^H`` scaled by
    ``coherence_seabed**(b1 + b2) * coherence_surface**(s1 + s2)``, where b and
    s count bottom and surface bounces. Factors are normally in [0, 1] but are
    not checked.

    Returns:
        R-by-R-by-F-by-S complex array
    """
    idx = images.resolve_indices(image_indices)
    Tn = image_transfer_functions(images, water_c, freqs, idx)
    weights = np.array([coherence_seabed ** images[n].n_bottom
                        * coherence_surface ** images[n].n_surface
                        for n in idx], dtype=float)

    # the pair weight w1 * w2 is separable, so the sum over all pairs collapses
    # to the outer product of the weighted transfer function
    return _outer(np.tensordot(weights, Tn, axes=1))
