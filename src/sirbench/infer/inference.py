"""Define available SIRBench inference processes."""

import logging
from typing import Optional

import arviz as az
from jax import Array
from jax.random import PRNGKey
from numpyro import handlers
from numpyro.infer import MCMC, NUTS, Predictive, init_to_median
from numpyro.infer.hmc import HMCState
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, PrivateAttr
from typing_extensions import Callable

logger = logging.getLogger("sirbench")


class InferenceProcess(BaseModel):
    """An Inference process for fitting a numpyro model to data.

    Meant to be an Abstract class for specific inference methods.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)
    numpyro_model: Callable = Field(
        description="""Numpyro model that samples parameters, simulates
        trajectories and optionally compares them to observed data."""
    )
    inference_prngkey: Array = PRNGKey(8675314)
    # bool flag marking inference complete
    _inference_complete: bool = PrivateAttr(default=False)
    # reference to the numpyro object doing inference
    _inferer: Optional[MCMC] = PrivateAttr(default=None)
    _inference_state: Optional[HMCState] = PrivateAttr(default=None)
    # kwargs used to fit, reused to generate posteriors.
    _inferer_kwargs: dict = PrivateAttr(default_factory=lambda: dict())

    def infer(self, **kwargs) -> MCMC:
        """Fit the numpyro model to data using the inference process.

        Additional keyword arguments are passed to the numpyro model.
        """
        raise NotImplementedError(
            "Inference process not implemented, please use a subclass."
        )

    def get_samples(
        self, group_by_chain=False, exclude_deterministic=True
    ) -> dict[str, Array]:
        """Get the posterior samples from the inference process."""
        raise NotImplementedError(
            "get_samples() process not implemented, please use a subclass."
        )

    def to_arviz(self) -> az.InferenceData:
        """Return the results of a fit as an arviz InferenceData object."""
        raise NotImplementedError(
            "to_arviz not implemented for abstract InferenceProcess"
        )


class MCMCProcess(InferenceProcess):
    """Inference process for fitting a numpyro model to data using NUTS."""

    num_samples: PositiveInt
    num_warmup: PositiveInt
    num_chains: PositiveInt
    nuts_max_tree_depth: PositiveInt
    nuts_init_strategy: Callable = init_to_median
    mcmc_kwargs: dict = Field(
        default_factory=lambda: dict(),
        description="""Extra kwargs to MCMC, for more info see:
          https://num.pyro.ai/en/stable/mcmc.html""",
    )
    nuts_kwargs: dict = Field(
        default_factory=lambda: dict(),
        description="""Extra kwargs to NUTS sampler, for more info see:
        https://num.pyro.ai/en/latest/mcmc.html#numpyro.infer.hmc.NUTS""",
    )
    progress_bar: bool = True

    def infer(self, **kwargs) -> MCMC:
        """Fit the numpyro model to data using MCMC.

        Additional keyword arguments are passed to the numpyro model.

        Returns
        -------
        MCMC
            The MCMC object used for inference.
        """
        inferer = MCMC(
            NUTS(
                self.numpyro_model,
                dense_mass=True,
                max_tree_depth=self.nuts_max_tree_depth,
                init_strategy=self.nuts_init_strategy,
                **self.nuts_kwargs,
            ),
            num_warmup=self.num_warmup,
            num_samples=self.num_samples,
            num_chains=self.num_chains,
            progress_bar=self.progress_bar,
            **self.mcmc_kwargs,
        )
        logger.info(
            "running NUTS with %s warmup and %s samples over %s chain(s)",
            self.num_warmup,
            self.num_samples,
            self.num_chains,
        )
        inferer.run(rng_key=self.inference_prngkey, **kwargs)
        self._inference_complete = True
        self._inferer = inferer
        # given to be an HMCState because we are using NUTS here.
        self._inference_state = inferer.last_state
        self._inferer_kwargs = kwargs
        num_divergent = int(inferer.get_extra_fields()["diverging"].sum())
        if num_divergent > 0:
            logger.warning(
                "%s divergent transitions after warmup", num_divergent
            )
        return inferer

    def get_samples(
        self, group_by_chain=False, exclude_deterministic=True
    ) -> dict[str, Array]:
        """Get the posterior samples from the inference process.

        Parameters
        ----------
        group_by_chain : bool
            whether or not to group posterior samples by chain or not. Adds
            a leading dimension to return dict's values if True.

        exclude_deterministic : bool
            whether or not to exclude parameters generated from
            `numpyro.deterministic` as keys in the returned dictionary, by
            default True.

        Returns
        -------
        dict[str, Array]
        A dictionary of posterior samples, where keys are parameter sites
        and values are the corresponding samples, arranged with shape
        `(num_chains * num_samples,)` if group_by_chain=False, otherwise arranged
        by `(num_chains, num_samples)`.
        """
        if not self._inference_complete:
            raise AssertionError(
                "Inference process not completed, please call infer() first."
            )
        assert isinstance(self._inferer, MCMC)
        samples = self._inferer.get_samples(group_by_chain=group_by_chain)
        if exclude_deterministic:
            latent_names = self._sample_site_names()
            samples = {
                name: value
                for name, value in samples.items()
                if name in latent_names
            }
        return samples

    def _sample_site_names(self) -> set[str]:
        # latent sample sites of the fitted model, excludes deterministic sites
        model_trace = handlers.trace(
            handlers.seed(self.numpyro_model, self.inference_prngkey)
        ).get_trace(**self._inferer_kwargs)
        return {
            name
            for name, site in model_trace.items()
            if site["type"] == "sample" and not site["is_observed"]
        }

    def to_arviz(self) -> az.InferenceData:
        """Return the results of a fit as an arviz InferenceData object.

        Returns
        -------
        arviz.InferenceData
            arviz InferenceData object containing both priors and posterior_predictive.

        Raises
        ------
        AssertionError
            if fitting has not yet been run via `infer()`
        """
        if not self._inference_complete:
            raise AssertionError(
                "Inference process not completed, please call infer() first."
            )
        posterior_predictive = Predictive(
            self.numpyro_model,
            posterior_samples=self.get_samples(),
        )(
            rng_key=self.inference_prngkey,
            **self._inferer_kwargs,  # arguments passed to `numpyro_model`
        )
        prior = Predictive(self.numpyro_model, num_samples=self.num_samples)(
            rng_key=self.inference_prngkey,
            **self._inferer_kwargs,  # arguments passed to `numpyro_model`
        )

        return az.from_numpyro(
            self._inferer,
            prior=prior,
            posterior_predictive=posterior_predictive,
        )
