import jax
import matplotlib

# double precision keeps ODE solutions and log densities comparable
jax.config.update("jax_enable_x64", True)
matplotlib.use("Agg")
